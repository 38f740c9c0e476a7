import pytest

from assistant_bot.config import FAST_MODEL, SMART_MODEL, load_settings


def test_missing_secrets_fatal_in_production():
    with pytest.raises(RuntimeError):
        load_settings({})


def test_missing_secrets_allowed_outside_production():
    settings = load_settings({"APP_ENV": "test"})
    assert settings.configured is False
    assert settings.fast_model == FAST_MODEL
    assert settings.smart_model == SMART_MODEL
    assert settings.webhook_rate_limit == "30/minute"


def test_overrides():
    settings = load_settings({
        "TELEGRAM_BOT_TOKEN": "123:abc",
        "OPENAI_API_KEY": "sk-test",
        "OPENAI_FAST_MODEL": "gpt-4o-mini",
        "OPENAI_SMART_MODEL": "gpt-4o",
        "COMPLETION_TIMEOUT_SECONDS": "10",
        "PORT": "9000",
    })
    assert settings.configured is True
    assert settings.app_env == "production"
    assert settings.fast_model == "gpt-4o-mini"
    assert settings.smart_model == "gpt-4o"
    assert settings.completion_timeout == 10.0
    assert settings.port == 9000
