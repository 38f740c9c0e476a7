"""Environment-driven settings for the webhook service."""
import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FAST_MODEL = "gpt-3.5-turbo"
SMART_MODEL = "gpt-4"

# Secrets that must be present for the bot to talk to Telegram and OpenAI.
_REQUIRED_ENV = ["TELEGRAM_BOT_TOKEN", "OPENAI_API_KEY"]


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    openai_api_key: str
    app_env: str = "production"
    port: int = 8080
    fast_model: str = FAST_MODEL
    smart_model: str = SMART_MODEL
    completion_timeout: float = 45.0
    webhook_rate_limit: str = "30/minute"

    @property
    def configured(self) -> bool:
        return bool(self.telegram_bot_token and self.openai_api_key)


def load_settings(environ=None) -> Settings:
    """Read settings from the environment.

    Missing secrets are fatal in production. Elsewhere they are logged and
    the webhook reports itself as not configured.
    """
    env = os.environ if environ is None else environ
    app_env = env.get("APP_ENV", "production").lower()

    missing = [key for key in _REQUIRED_ENV if not env.get(key)]
    if missing:
        logger.error(f"Missing required environment variables: {missing}")
        if app_env == "production":
            raise RuntimeError("Missing required environment variables")

    return Settings(
        telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", ""),
        openai_api_key=env.get("OPENAI_API_KEY", ""),
        app_env=app_env,
        port=int(env.get("PORT", "8080")),
        fast_model=env.get("OPENAI_FAST_MODEL", FAST_MODEL),
        smart_model=env.get("OPENAI_SMART_MODEL", SMART_MODEL),
        completion_timeout=float(env.get("COMPLETION_TIMEOUT_SECONDS", "45")),
        webhook_rate_limit=env.get("WEBHOOK_RATE_LIMIT", "30/minute"),
    )
