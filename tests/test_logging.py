"""Tests for the structured JSONL log mirror."""

import json
import logging

import pytest

from core.logging_setup import _JsonLogFormatter, configure_optional_json_logging, log


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("popebot", logging.INFO, __file__, 1, message, None, None)


class TestJsonLogFormatter:
    def test_chat_prefix_split_out(self):
        payload = json.loads(_JsonLogFormatter().format(_record("[42] Bot: hi")))
        assert payload["chat_id"] == "42"
        assert payload["event"] == "outbound_message"
        assert payload["message"] == "Bot: hi"
        assert payload["level"] == "INFO"

    def test_negative_group_chat_id(self):
        payload = json.loads(_JsonLogFormatter().format(_record("[-100123] Message split into 3 parts")))
        assert payload["chat_id"] == "-100123"
        assert payload["event"] == "chunking"

    def test_unprefixed_message(self):
        payload = json.loads(_JsonLogFormatter().format(_record("Webhook set to https://x: True")))
        assert payload["chat_id"] is None
        assert payload["event"] == "webhook"

    def test_unknown_message_is_general(self):
        payload = json.loads(_JsonLogFormatter().format(_record("starting up")))
        assert payload["event"] == "general"


class TestConfigureJsonLogging:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        monkeypatch.delenv("JSON_LOG_ENABLED", raising=False)
        monkeypatch.delenv("JSON_LOG_PATH", raising=False)

    def test_disabled_by_default(self, tmp_path):
        assert configure_optional_json_logging(tmp_path) is None
        assert not (tmp_path / "logs").exists()

    def test_writes_jsonl_under_runtime_root(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JSON_LOG_ENABLED", "true")
        before = list(log.handlers)
        try:
            path = configure_optional_json_logging(tmp_path)
            assert path == (tmp_path / "logs" / "popebot.jsonl").resolve()
            # A second call reuses the handler.
            assert configure_optional_json_logging(tmp_path) == path
            assert len(log.handlers) == len(before) + 1

            log.info("[7] Job abc completed")
            for handler in log.handlers:
                handler.flush()
            lines = path.read_text(encoding="utf-8").splitlines()
            last = json.loads(lines[-1])
            assert last["chat_id"] == "7"
            assert last["event"] == "job_notification"
        finally:
            for handler in list(log.handlers):
                if handler not in before:
                    log.removeHandler(handler)
                    handler.close()
