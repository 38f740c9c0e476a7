import os

# The app module reads settings at import time; keep tests offline.
os.environ["APP_ENV"] = "test"
os.environ.pop("TELEGRAM_BOT_TOKEN", None)
os.environ.pop("OPENAI_API_KEY", None)

from unittest.mock import AsyncMock

import pytest

from assistant_bot.services.conversation_store import ConversationStore
from assistant_bot.telegram_handler import TelegramBotHandler

CHAT_ID = 4242


class FakeGateway:
    """Records outbound Telegram calls instead of sending them."""

    def __init__(self):
        self.calls = []

    async def send_message(self, chat_id, text, reply_markup=None):
        self.calls.append(("send", chat_id, text, reply_markup))

    async def edit_message(self, chat_id, message_id, text):
        self.calls.append(("edit", chat_id, message_id, text))

    async def answer_callback(self, callback_id):
        self.calls.append(("answer", callback_id))

    def of(self, kind):
        return [call for call in self.calls if call[0] == kind]


def message_update(text=None, chat_id=CHAT_ID, update_id=1):
    message = {
        "message_id": 10,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": chat_id, "is_bot": False, "first_name": "Ada"},
    }
    if text is not None:
        message["text"] = text
    return {"update_id": update_id, "message": message}


def callback_update(data, chat_id=CHAT_ID, callback_id="cb-1", message_id=77):
    return {
        "update_id": 2,
        "callback_query": {
            "id": callback_id,
            "from": {"id": chat_id, "is_bot": False, "first_name": "Ada"},
            "chat_instance": "instance-1",
            "data": data,
            "message": {
                "message_id": message_id,
                "date": 1700000000,
                "chat": {"id": chat_id, "type": "private"},
                "text": "Choose AI Model:",
            },
        },
    }


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def completion():
    fake = AsyncMock()
    fake.complete = AsyncMock(return_value="Hi there!")
    return fake


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def handler(gateway, completion, store):
    return TelegramBotHandler(gateway=gateway, completion=completion, store=store)
