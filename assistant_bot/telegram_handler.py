"""Telegram webhook handler bridging chats to an OpenAI completion model.

Flow for one webhook POST:
  main.py route
      │
      ▼
  TelegramBotHandler.handle_webhook()  ── decode_update() ──┐
      │                                                     │
      ├── UserMessage   → handle_message()                  │
      │       /start /help /clear /model  (own replies)     │
      │       other /commands, empty text (ignored)         │
      │       free text → _conversation_turn() → OpenAI     │
      │                                                     │
      ├── CallbackPress → handle_callback_query()           │
      │       model_* buttons switch the chat's model       │
      │                                                     │
      └── UnknownUpdate → ignored  ◄────────────────────────┘

Key points:
  - Conversation history is kept per chat in a ConversationStore, capped
    at the last 20 entries before every completion call.
  - Completion failures never escape the conversation turn. They are
    classified (quota, bad key, rate limit, other) and reported in chat.
  - Every button press is acknowledged exactly once, after any edit, so
    Telegram clears the loading spinner.
"""
import logging
import time

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from assistant_bot.config import FAST_MODEL, SMART_MODEL
from assistant_bot.metrics import (
    COMMAND_TOTAL,
    COMPLETION_ERRORS,
    COMPLETION_LATENCY,
    MODEL_SELECTIONS,
    UPDATES_TOTAL,
)
from assistant_bot.services.completion_service import (
    CompletionErrorKind,
    classify_completion_error,
)
from assistant_bot.services.conversation_store import MAX_HISTORY
from assistant_bot.updates import CallbackPress, UserMessage, decode_update

logger = logging.getLogger(__name__)

MODEL_CALLBACK_PREFIX = "model_"
FAST_MODEL_TOKEN = "model_gpt35"
SMART_MODEL_TOKEN = "model_gpt4"

SYSTEM_PROMPT = (
    "You are a helpful AI assistant on Telegram. Be friendly, concise, and helpful.\n"
    "Use emojis appropriately but don't overuse them.\n"
    "Format your responses clearly and break up long text into paragraphs.\n"
    "You can use *bold* and _italic_ text formatting."
)

ERROR_HEADER = "❌ *Error occurred!*\n\n"
ERROR_MESSAGES = {
    CompletionErrorKind.QUOTA: "OpenAI API quota exceeded. Please check your billing.",
    CompletionErrorKind.INVALID_KEY: "Invalid OpenAI API key configuration.",
    CompletionErrorKind.RATE_LIMIT: "Rate limit exceeded. Please try again in a moment.",
    CompletionErrorKind.OTHER: "Something went wrong. Please try again later.",
}


def _command_name(text: str) -> str:
    """Return the command word of a slash message, without the slash."""
    return text.split(maxsplit=1)[0].lstrip("/") if text else ""


class TelegramBotHandler:
    """Dispatches decoded Telegram updates to command and chat handlers."""

    WELCOME_MESSAGE = """🤖 *Welcome to AI Assistant Bot!*

I'm your personal AI assistant powered by OpenAI. I can help you with:

🧠 *Answering questions*
✍️ *Creative writing*
📚 *Learning and explanations*
💻 *Technical assistance*
🎨 *Creative projects*
🔍 *Research and analysis*

Just send me a message and I'll respond!

*Commands:*
/start - Show this welcome message
/clear - Clear conversation history
/help - Show help information
/model - Change AI model

Let's chat! 🚀"""

    HELP_MESSAGE = """🆘 *Help & Commands*

*Available Commands:*
/start - Welcome message
/clear - Clear your conversation history
/help - Show this help
/model - Change AI model (GPT-3.5/GPT-4)

*How to use:*
Just send me any message and I'll respond with AI-powered answers!

*Features:*
- Remembers conversation context
- Supports multiple AI models
- Fast and accurate responses
- Creative and analytical capabilities

*Tips:*
- Be specific in your questions
- Use /clear to start fresh conversations
- Try different models for different tasks"""

    CLEAR_MESSAGE = (
        "🗑️ *Conversation cleared!* \n\n"
        "Your chat history has been reset. Start a new conversation!"
    )

    MODEL_PROMPT = "🤖 *Choose AI Model:*"

    def __init__(
        self,
        gateway,
        completion,
        store,
        fast_model: str = FAST_MODEL,
        smart_model: str = SMART_MODEL,
    ):
        """Store collaborators.

        Args:
            gateway: TelegramGateway (send / edit / answer callback).
            completion: CompletionService used for conversation turns.
            store: ConversationStore holding per-chat history and model.
            fast_model: Model id behind the fast-tier button.
            smart_model: Model id behind the smart-tier button.
        """
        self.gateway = gateway
        self.completion = completion
        self.store = store
        self.model_tokens = {
            FAST_MODEL_TOKEN: fast_model,
            SMART_MODEL_TOKEN: smart_model,
        }
        self.model_names = {
            fast_model: "GPT-3.5 Turbo ⚡",
            smart_model: "GPT-4 🧠",
        }
        # Prefix -> handler; checked in order, first match wins.
        self.commands = [
            ("/start", self.start_command),
            ("/help", self.help_command),
            ("/clear", self.clear_command),
            ("/model", self.model_command),
        ]

    # ------------------------------------------------------------------
    # Webhook entry point (called by main.py's FastAPI route)
    # ------------------------------------------------------------------

    async def handle_webhook(self, update_data: dict, bot=None):
        """Decode a raw webhook body and route it.

        Decoding errors propagate to the caller; handler errors are dealt
        with inside the handlers.
        """
        update = decode_update(update_data, bot)

        if isinstance(update, UserMessage):
            UPDATES_TOTAL.labels(type="message").inc()
            await self.handle_message(update)
        elif isinstance(update, CallbackPress):
            UPDATES_TOTAL.labels(type="callback").inc()
            await self.handle_callback_query(update)
        else:
            UPDATES_TOTAL.labels(type="unknown").inc()
            logger.debug(f"Ignoring update {update.update_id} with no message or callback")

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def handle_message(self, message: UserMessage):
        text = message.text

        if text:
            for prefix, handler in self.commands:
                if text.startswith(prefix):
                    COMMAND_TOTAL.labels(command=prefix.lstrip("/")).inc()
                    await handler(message.chat_id)
                    return

        if not text or text.startswith("/"):
            if text:
                logger.info(f"Ignoring unknown command /{_command_name(text)} in chat {message.chat_id}")
            return

        await self._conversation_turn(message.chat_id, text)

    async def start_command(self, chat_id: int):
        await self.gateway.send_message(chat_id, self.WELCOME_MESSAGE)

    async def help_command(self, chat_id: int):
        await self.gateway.send_message(chat_id, self.HELP_MESSAGE)

    async def clear_command(self, chat_id: int):
        if self.store.clear(chat_id):
            logger.info(f"Cleared conversation for chat {chat_id}")
        await self.gateway.send_message(chat_id, self.CLEAR_MESSAGE)

    async def model_command(self, chat_id: int):
        keyboard = InlineKeyboardMarkup([
            [
                InlineKeyboardButton("⚡ GPT-3.5 Turbo (Fast)", callback_data=FAST_MODEL_TOKEN),
                InlineKeyboardButton("🧠 GPT-4 (Smart)", callback_data=SMART_MODEL_TOKEN),
            ]
        ])
        await self.gateway.send_message(chat_id, self.MODEL_PROMPT, reply_markup=keyboard)

    async def _conversation_turn(self, chat_id: int, text: str):
        """Run one user -> model -> user exchange.

        History is only extended with the reply once the completion call
        succeeded; on failure the user gets a classified error message.
        """
        logger.info(f"Processing message from chat {chat_id}: {text[:50]}")
        state = self.store.get_or_create(chat_id)
        state.add("user", text)
        state.truncate(MAX_HISTORY)

        messages = [{"role": "system", "content": SYSTEM_PROMPT}, *state.history]
        model = state.model

        start_time = time.monotonic()
        try:
            reply = await self.completion.complete(model, messages)
        except Exception as e:
            kind = classify_completion_error(e)
            COMPLETION_ERRORS.labels(type=kind.value).inc()
            logger.exception(f"Completion failed for chat {chat_id} ({kind.value}): {e}")
            await self._reply(chat_id, ERROR_HEADER + ERROR_MESSAGES[kind])
            return
        finally:
            COMPLETION_LATENCY.labels(model=model).observe(time.monotonic() - start_time)

        state.add("assistant", reply)
        await self._reply(chat_id, reply)

    async def _reply(self, chat_id: int, text: str):
        """Send a conversation reply; delivery failures are logged, not raised."""
        try:
            await self.gateway.send_message(chat_id, text)
        except Exception as e:
            logger.error(f"Failed to deliver reply to chat {chat_id}: {e}")

    # ------------------------------------------------------------------
    # Inline keyboard callbacks
    # ------------------------------------------------------------------

    async def handle_callback_query(self, callback: CallbackPress):
        """Apply a button press, then acknowledge it exactly once."""
        try:
            data = callback.data or ""
            if data.startswith(MODEL_CALLBACK_PREFIX):
                await self._select_model(callback, data)
        finally:
            await self.gateway.answer_callback(callback.callback_id)

    async def _select_model(self, callback: CallbackPress, token: str):
        # Any other model_* token selects the smart tier.
        model = self.model_tokens.get(token, self.model_tokens[SMART_MODEL_TOKEN])
        if callback.chat_id is None:
            logger.warning(f"Model callback {callback.callback_id} has no originating message")
            return

        self.store.set_model(callback.chat_id, model)
        MODEL_SELECTIONS.labels(model=model).inc()
        logger.info(f"Chat {callback.chat_id} switched to {model}")

        try:
            await self.gateway.edit_message(
                callback.chat_id,
                callback.message_id,
                f"✅ *Model changed to {self.model_names[model]}*",
            )
        except Exception as e:
            logger.error(f"Failed to confirm model change in chat {callback.chat_id}: {e}")
