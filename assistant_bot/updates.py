"""Decode raw webhook JSON into the update kinds the bot acts on."""
from dataclasses import dataclass

from telegram import Update


@dataclass(frozen=True)
class UserMessage:
    chat_id: int
    text: str | None


@dataclass(frozen=True)
class CallbackPress:
    callback_id: str
    data: str | None
    # The originating message can be missing for inline-mode buttons.
    chat_id: int | None = None
    message_id: int | None = None


@dataclass(frozen=True)
class UnknownUpdate:
    update_id: int | None = None


def decode_update(update_data, bot=None) -> UserMessage | CallbackPress | UnknownUpdate:
    """Decode a webhook body once, at the boundary.

    Raises ValueError/TypeError/KeyError for bodies that are not a Telegram
    update; the webhook route turns those into a 500.
    """
    if not isinstance(update_data, dict):
        raise ValueError(f"Update must be a JSON object, got {type(update_data).__name__}")

    if not update_data.get("message") and not update_data.get("callback_query"):
        return UnknownUpdate(update_id=update_data.get("update_id"))

    update = Update.de_json(update_data, bot)

    if update.message:
        return UserMessage(chat_id=update.message.chat.id, text=update.message.text)

    query = update.callback_query
    message = query.message
    return CallbackPress(
        callback_id=query.id,
        data=query.data,
        chat_id=message.chat.id if message else None,
        message_id=message.message_id if message else None,
    )
