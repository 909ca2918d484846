"""Tests for environment configuration."""

import pytest

from washroom.config import Config

BASE_ENV = {"BOT_TOKEN": "123:abc", "TG_ID": "12345", "TG_HASH": "deadbeef"}


@pytest.fixture
def env(monkeypatch):
    for name in ("BOT_TOKEN", "TELOXIDE_TOKEN", "TG_ID", "TG_HASH", "SESSION_FILE",
                 "SESSION_KEY", "ROLL_ANIMATION", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    for name, value in BASE_ENV.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


class TestConfig:

    def test_defaults(self, env):
        config = Config()
        assert config.account.api_id == 12345
        assert config.session.path == "echo.session"
        assert config.session.key is None
        assert config.media.roll_animation == "assets/rickroll-roll.gif"
        assert config.log_level == "INFO"

    def test_teloxide_token_fallback(self, env):
        env.delenv("BOT_TOKEN")
        env.setenv("TELOXIDE_TOKEN", "456:def")
        assert Config().bot.token == "456:def"

    def test_missing_token(self, env):
        env.delenv("BOT_TOKEN")
        with pytest.raises(ValueError, match="BOT_TOKEN"):
            Config()

    def test_non_numeric_api_id(self, env):
        env.setenv("TG_ID", "abc")
        with pytest.raises(ValueError, match="TG_ID"):
            Config()

    def test_missing_api_hash(self, env):
        env.setenv("TG_HASH", "")
        with pytest.raises(ValueError, match="TG_HASH"):
            Config()

    def test_bad_log_level(self, env):
        env.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            Config()
