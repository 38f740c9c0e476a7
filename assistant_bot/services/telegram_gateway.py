"""Thin wrapper around the Telegram Bot API calls the handler needs."""
import logging

from telegram import Bot, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import BadRequest

logger = logging.getLogger(__name__)

# Telegram's sendMessage rejects texts longer than this.
MAX_MESSAGE_LENGTH = 4096


def split_text(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split text into chunks of at most ``limit`` characters."""
    if len(text) <= limit:
        return [text]
    return [text[i:i + limit] for i in range(0, len(text), limit)]


def _is_parse_error(exc: BadRequest) -> bool:
    return "can't parse entities" in str(exc).lower()


class TelegramGateway:
    """Send, edit and acknowledge through a python-telegram-bot ``Bot``.

    Messages go out with Markdown formatting. Model replies often contain
    unbalanced ``*`` or ``_``; when Telegram refuses to parse them the same
    text is delivered again without a parse mode.
    """

    def __init__(self, bot: Bot, parse_mode: str = ParseMode.MARKDOWN):
        self.bot = bot
        self.parse_mode = parse_mode

    @classmethod
    def from_token(cls, bot_token: str) -> "TelegramGateway":
        return cls(Bot(token=bot_token))

    async def initialize(self):
        await self.bot.initialize()

    async def shutdown(self):
        await self.bot.shutdown()

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: InlineKeyboardMarkup | None = None,
    ):
        chunks = split_text(text)
        for index, chunk in enumerate(chunks):
            # Buttons belong under the last chunk.
            markup = reply_markup if index == len(chunks) - 1 else None
            try:
                await self.bot.send_message(
                    chat_id=chat_id,
                    text=chunk,
                    parse_mode=self.parse_mode,
                    reply_markup=markup,
                )
            except BadRequest as e:
                if not _is_parse_error(e):
                    raise
                logger.warning(f"Markdown rejected for chat {chat_id}, sending plain text")
                await self.bot.send_message(
                    chat_id=chat_id, text=chunk, reply_markup=markup
                )

    async def edit_message(self, chat_id: int, message_id: int, text: str):
        try:
            await self.bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                parse_mode=self.parse_mode,
            )
        except BadRequest as e:
            if not _is_parse_error(e):
                raise
            logger.warning(f"Markdown rejected editing message {message_id}, sending plain text")
            await self.bot.edit_message_text(
                text=text, chat_id=chat_id, message_id=message_id
            )

    async def answer_callback(self, callback_id: str):
        await self.bot.answer_callback_query(callback_query_id=callback_id)
