"""OpenAI chat completion client and error classification."""
import enum
import logging
from dataclasses import asdict, dataclass

import openai
from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationParams:
    max_tokens: int = 1000
    temperature: float = 0.7
    presence_penalty: float = 0.1
    frequency_penalty: float = 0.1


class CompletionErrorKind(enum.Enum):
    QUOTA = "quota"
    INVALID_KEY = "invalid_key"
    RATE_LIMIT = "rate_limit"
    OTHER = "other"


def classify_completion_error(exc: Exception) -> CompletionErrorKind:
    """Map a completion failure onto the error kinds shown to users.

    OpenAI reports an exhausted quota with HTTP 429 as well, so the error
    code has to be checked before the status.
    """
    code = getattr(exc, "code", None)
    if code == "insufficient_quota":
        return CompletionErrorKind.QUOTA
    if code == "invalid_api_key":
        return CompletionErrorKind.INVALID_KEY
    if isinstance(exc, openai.RateLimitError) or getattr(exc, "status_code", None) == 429:
        return CompletionErrorKind.RATE_LIMIT
    return CompletionErrorKind.OTHER


class CompletionService:
    """Turn a list of role-tagged messages into a reply string."""

    def __init__(self, client: AsyncOpenAI, params: GenerationParams | None = None):
        self.client = client
        self.params = params or GenerationParams()

    @classmethod
    def from_api_key(cls, api_key: str, timeout: float = 45.0) -> "CompletionService":
        # No retries: a failed call is reported to the user straight away.
        return cls(AsyncOpenAI(api_key=api_key, max_retries=0, timeout=timeout))

    async def complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        params: GenerationParams | None = None,
    ) -> str:
        params = params or self.params
        completion = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            **asdict(params),
        )
        return completion.choices[0].message.content or ""

    async def close(self):
        await self.client.close()
