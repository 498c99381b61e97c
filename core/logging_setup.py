"""Logging configuration for PopeBot."""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("popebot")

# python-telegram-bot talks through httpx; keep request logs quiet
# unless POPEBOT_VERBOSE_HTTP=1.
if os.getenv("POPEBOT_VERBOSE_HTTP", "").strip().lower() not in {"1", "true", "yes"}:
    for _name in ("httpx", "httpcore", "telegram.ext"):
        logging.getLogger(_name).setLevel(logging.WARNING)

# Messages about one chat are written as "[<chat_id>] ...".
_CHAT_PREFIX_RE = re.compile(r"^\[(?P<chat>-?\d+)\]\s*(?P<body>.*)$", re.DOTALL)

# First matching pattern names the event; order matters.
_EVENT_PATTERNS = (
    (re.compile(r"^Bot: "), "outbound_message"),
    (re.compile(r"split into \d+ parts"), "chunking"),
    (re.compile(r"resending as plain text|Failed to deliver"), "delivery_error"),
    (re.compile(r"^Job \S+ "), "job_notification"),
    (re.compile(r"^Webhook "), "webhook"),
    (re.compile(r"reaction", re.IGNORECASE), "reaction"),
    (re.compile(r"^Circular include"), "prompt_render"),
    (re.compile(r"^Subscribed "), "subscription"),
)


def _event_for(body: str) -> str:
    for pattern, event in _EVENT_PATTERNS:
        if pattern.search(body):
            return event
    return "general"


class _JsonLogFormatter(logging.Formatter):
    """One JSON object per line, with the chat id split out of the message."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        chat_id = None
        matched = _CHAT_PREFIX_RE.match(message)
        if matched:
            chat_id = matched.group("chat")
            message = matched.group("body")

        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "chat_id": chat_id,
            "event": _event_for(message),
            "message": message,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_optional_json_logging(runtime_root: str | Path) -> Path | None:
    """Mirror the popebot logger to a JSONL file when JSON_LOG_ENABLED is set.

    JSON_LOG_PATH overrides the default <runtime_root>/logs/popebot.jsonl;
    relative values resolve against runtime_root.
    """
    if os.getenv("JSON_LOG_ENABLED", "").strip().lower() not in {"1", "true", "yes", "on"}:
        return None

    root = Path(runtime_root).expanduser().resolve()
    path = Path(os.getenv("JSON_LOG_PATH", "").strip() or "logs/popebot.jsonl").expanduser()
    if not path.is_absolute():
        path = root / path
    path = path.resolve()

    for handler in log.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename).resolve() == path:
            return path

    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(_JsonLogFormatter())
    log.addHandler(file_handler)
    log.info(f"Structured JSON logging enabled: {path.as_posix()}")
    return path
