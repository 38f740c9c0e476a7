"""In-memory per-chat conversation state.

State lives only as long as the process. There is no per-chat locking:
two updates for the same chat racing each other may interleave their
history appends.
"""
import logging
from dataclasses import dataclass, field

from assistant_bot.config import FAST_MODEL

logger = logging.getLogger(__name__)

# Keep the last 10 user/assistant exchanges.
MAX_HISTORY = 20


@dataclass
class ConversationState:
    model: str
    history: list[dict[str, str]] = field(default_factory=list)

    def add(self, role: str, content: str) -> None:
        self.history.append({"role": role, "content": content})

    def truncate(self, limit: int = MAX_HISTORY) -> None:
        """Drop the oldest entries so at most ``limit`` remain."""
        if len(self.history) > limit:
            self.history = self.history[-limit:]


class ConversationStore:
    """Maps chat id to ConversationState."""

    def __init__(self, default_model: str = FAST_MODEL):
        self.default_model = default_model
        self._states: dict[int, ConversationState] = {}

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def get(self, chat_id: int) -> ConversationState | None:
        return self._states.get(chat_id)

    def get_or_create(self, chat_id: int) -> ConversationState:
        state = self._states.get(chat_id)
        if state is None:
            state = ConversationState(model=self.default_model)
            self._states[chat_id] = state
            logger.info(f"Created conversation state for chat {chat_id}")
        return state

    def set_model(self, chat_id: int, model: str) -> ConversationState:
        """Select a model for a chat, creating an empty state if needed."""
        state = self._states.get(chat_id)
        if state is None:
            state = ConversationState(model=model)
            self._states[chat_id] = state
        else:
            state.model = model
        return state

    def clear(self, chat_id: int) -> bool:
        """Forget a chat entirely. Returns whether anything was removed."""
        return self._states.pop(chat_id, None) is not None
