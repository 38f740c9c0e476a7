"""FastAPI entry point for the Telegram webhook."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from assistant_bot.config import load_settings
from assistant_bot.logging_config import setup_logging
from assistant_bot.services.completion_service import CompletionService
from assistant_bot.services.conversation_store import ConversationStore
from assistant_bot.services.telegram_gateway import TelegramGateway
from assistant_bot.telegram_handler import TelegramBotHandler

setup_logging()
logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook/telegram"

settings = load_settings()
telegram_handler = None

if settings.telegram_bot_token:
    logger.info(f"TELEGRAM_BOT_TOKEN found, length: {len(settings.telegram_bot_token)}")
else:
    logger.warning("TELEGRAM_BOT_TOKEN not set - webhook disabled")


async def init_telegram():
    """Build the gateway, completion client and handler once."""
    global telegram_handler
    if not settings.configured or telegram_handler is not None:
        return
    try:
        logger.info("Initializing Telegram bot...")
        gateway = TelegramGateway.from_token(settings.telegram_bot_token)
        await gateway.initialize()

        telegram_handler = TelegramBotHandler(
            gateway=gateway,
            completion=CompletionService.from_api_key(
                settings.openai_api_key, timeout=settings.completion_timeout
            ),
            store=ConversationStore(default_model=settings.fast_model),
            fast_model=settings.fast_model,
            smart_model=settings.smart_model,
        )
        logger.info("Telegram bot initialized successfully")
    except Exception as e:
        logger.exception(f"Failed to initialize Telegram bot: {e}")


async def shutdown_telegram():
    global telegram_handler
    if telegram_handler is None:
        return
    await telegram_handler.gateway.shutdown()
    await telegram_handler.completion.close()
    telegram_handler = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_telegram()
    yield
    await shutdown_telegram()


app = FastAPI(lifespan=lifespan)

# Rate limiting configuration
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors.

    Returns JSONResponse instead of raising exception.
    """
    logger.warning(f"Rate limit exceeded for {request.client.host}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": "Too many requests. Please try again later.",
        },
    )


@app.post(WEBHOOK_PATH)
@limiter.limit(settings.webhook_rate_limit)
async def telegram_webhook(request: Request):
    """Webhook endpoint for Telegram bot updates.

    Only POST is routed here; FastAPI answers other methods with a JSON 405.
    """
    # Lazy initialization when the lifespan did not run (e.g. bare ASGI mounts).
    if telegram_handler is None and settings.configured:
        await init_telegram()

    if not telegram_handler:
        return JSONResponse(status_code=503, content={"error": "Telegram bot not configured"})

    try:
        update_data = await request.json()
        bot = getattr(telegram_handler.gateway, "bot", None)
        await telegram_handler.handle_webhook(update_data, bot)
    except Exception as e:
        logger.exception(f"Webhook error: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    return {"success": True}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/healthz")
async def healthz():
    """Basic health check."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
