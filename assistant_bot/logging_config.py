"""JSON log output for the webhook service."""
import logging
import os

from pythonjsonlogger import jsonlogger


def setup_logging() -> None:
    """Route all records through one JSON handler at LOG_LEVEL."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers = [handler]

    # httpx logs every Bot API and OpenAI request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
