"""Shared constants used by the PopeBot notifier."""

from __future__ import annotations

from pathlib import Path

# Project root for resolving runtime-relative paths reliably.
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Telegram's hard per-message character limit.
TELEGRAM_MAX_LENGTH = 4096

# Tags Telegram's HTML parse mode accepts and that we pass through untouched.
ALLOWED_TAGS = ("b", "i", "s", "u", "code", "pre", "a")

# Preferred cut points for long messages, best first.
SPLIT_DELIMITERS = ("\n\n", "\n", ". ", " ")

# A delimiter only counts if it sits past this fraction of the window.
SPLIT_MIN_RATIO = 0.3

# Typing indicator expires after ~5s on Telegram's side; re-send in this window.
TYPING_REFRESH_MIN_SEC = 5.5
TYPING_REFRESH_MAX_SEC = 8.0

DEFAULT_REACTION = "\U0001F44D"
