import pytest

from assistant_bot.updates import CallbackPress, UnknownUpdate, UserMessage, decode_update

from conftest import CHAT_ID, callback_update, message_update


def test_decode_message():
    assert decode_update(message_update("hi")) == UserMessage(chat_id=CHAT_ID, text="hi")


def test_decode_message_without_text():
    assert decode_update(message_update()) == UserMessage(chat_id=CHAT_ID, text=None)


def test_decode_callback():
    assert decode_update(callback_update("model_gpt4")) == CallbackPress(
        callback_id="cb-1", data="model_gpt4", chat_id=CHAT_ID, message_id=77
    )


def test_decode_callback_without_message():
    data = callback_update("model_gpt4")
    del data["callback_query"]["message"]
    data["callback_query"]["inline_message_id"] = "inline-1"

    update = decode_update(data)

    assert update.chat_id is None
    assert update.message_id is None


def test_decode_unknown():
    assert decode_update({"update_id": 9, "poll": {}}) == UnknownUpdate(update_id=9)


@pytest.mark.parametrize("body", [[], "text", None, 3])
def test_decode_rejects_non_objects(body):
    with pytest.raises(ValueError):
        decode_update(body)
