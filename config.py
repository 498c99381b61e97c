"""
PopeBot — Configuration
Flat .env-based configuration system.
"""

import os
import re
from dataclasses import dataclass, field
from dotenv import load_dotenv

from core.constants import TELEGRAM_MAX_LENGTH

load_dotenv()


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _strip_inline_comment(value: str) -> str:
    """Strip shell-style inline comments for unquoted env values."""
    if not value:
        return ""
    cleaned = value.strip()
    if not cleaned:
        return ""
    if cleaned.startswith("#"):
        return ""
    return re.sub(r"\s+#.*$", "", cleaned).strip()


def _parse_flag(raw: str, default: bool = False) -> bool:
    cleaned = _strip_inline_comment(raw).lower()
    if not cleaned:
        return default
    return cleaned in _TRUE_VALUES


def _parse_int(raw: str, default: int) -> int:
    cleaned = _strip_inline_comment(raw)
    if not cleaned:
        return default
    try:
        return int(cleaned)
    except ValueError:
        return default


def _parse_chat_ids(raw: str) -> list[str]:
    """Parse TELEGRAM_CHAT_ID as one or more comma-separated numeric chat IDs."""
    cleaned = _strip_inline_comment(raw)
    if not cleaned:
        return []

    chat_ids: list[str] = []
    for chunk in cleaned.split(","):
        token = chunk.strip()
        if not token:
            continue
        # Chat IDs are numeric (groups are negative); ignore placeholder text safely.
        if token.lstrip("-").isdigit():
            chat_ids.append(token)
    return chat_ids


@dataclass
class Config:
    # Telegram
    telegram_bot_token: str = ""
    telegram_chat_ids: list[str] = field(default_factory=list)
    telegram_webhook_url: str = ""
    telegram_webhook_secret: str = ""
    telegram_max_message_length: int = TELEGRAM_MAX_LENGTH
    telegram_disable_preview: bool = False

    # Storage
    db_path: str = ".popebot/popebot.db"

    # Prompts
    event_handler_md: str = "config/EVENT_HANDLER.md"


def load_config() -> Config:
    """Load config from environment variables."""
    cfg = Config(
        telegram_bot_token=_strip_inline_comment(os.getenv("TELEGRAM_BOT_TOKEN", "")),
        telegram_chat_ids=_parse_chat_ids(os.getenv("TELEGRAM_CHAT_ID", "")),
        telegram_webhook_url=_strip_inline_comment(os.getenv("TELEGRAM_WEBHOOK_URL", "")),
        telegram_webhook_secret=_strip_inline_comment(os.getenv("TELEGRAM_WEBHOOK_SECRET", "")),
        telegram_max_message_length=_parse_int(
            os.getenv("TELEGRAM_MAX_MESSAGE_LENGTH", ""), TELEGRAM_MAX_LENGTH
        ),
        telegram_disable_preview=_parse_flag(os.getenv("TELEGRAM_DISABLE_PREVIEW", "")),
        db_path=_strip_inline_comment(os.getenv("DB_PATH", "")) or ".popebot/popebot.db",
        event_handler_md=_strip_inline_comment(os.getenv("EVENT_HANDLER_MD", ""))
        or "config/EVENT_HANDLER.md",
    )

    # Telegram rejects anything longer, and the splitter needs a positive bound.
    cfg.telegram_max_message_length = min(TELEGRAM_MAX_LENGTH, max(1, cfg.telegram_max_message_length))

    return cfg
