"""Tests for .env configuration loading."""

import pytest

from config import load_config

_ENV_KEYS = (
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "TELEGRAM_WEBHOOK_URL",
    "TELEGRAM_WEBHOOK_SECRET",
    "TELEGRAM_MAX_MESSAGE_LENGTH",
    "TELEGRAM_DISABLE_PREVIEW",
    "DB_PATH",
    "EVENT_HANDLER_MD",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoadConfig:
    def test_defaults(self):
        cfg = load_config()
        assert cfg.telegram_bot_token == ""
        assert cfg.telegram_chat_ids == []
        assert cfg.telegram_max_message_length == 4096
        assert cfg.telegram_disable_preview is False
        assert cfg.db_path == ".popebot/popebot.db"
        assert cfg.event_handler_md == "config/EVENT_HANDLER.md"

    def test_chat_ids_parsed(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "123, -456, abc  # main chats")
        assert load_config().telegram_chat_ids == ["123", "-456"]

    def test_inline_comment_stripped(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc   # from BotFather")
        assert load_config().telegram_bot_token == "123:abc"

    @pytest.mark.parametrize(
        "raw, expected",
        [("2000", 2000), ("9000", 4096), ("0", 1), ("-5", 1), ("bogus", 4096)],
    )
    def test_max_length_clamped(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TELEGRAM_MAX_MESSAGE_LENGTH", raw)
        assert load_config().telegram_max_message_length == expected

    @pytest.mark.parametrize("raw, expected", [("yes", True), ("1", True), ("off", False), ("", False)])
    def test_disable_preview_flag(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TELEGRAM_DISABLE_PREVIEW", raw)
        assert load_config().telegram_disable_preview is expected
