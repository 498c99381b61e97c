"""PopeBot core package."""

from .constants import ALLOWED_TAGS, PROJECT_ROOT, TELEGRAM_MAX_LENGTH
from .jobs import format_job_notification, notify_job
from .logging_setup import log
from .markdown import (
    escape_html,
    format_for_telegram,
    markdown_to_telegram_html,
    smart_split,
    strip_html_comments,
)
from .prompts import render_md, resolve_runtime_path
from .types import JobResult, Notification, Subscription

__all__ = [
    "ALLOWED_TAGS",
    "escape_html",
    "format_for_telegram",
    "format_job_notification",
    "JobResult",
    "log",
    "markdown_to_telegram_html",
    "Notification",
    "notify_job",
    "PROJECT_ROOT",
    "render_md",
    "resolve_runtime_path",
    "smart_split",
    "strip_html_comments",
    "Subscription",
    "TELEGRAM_MAX_LENGTH",
]
