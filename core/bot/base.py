"""Core notifier state and shared utility methods."""

from __future__ import annotations

import asyncio
import re

from telegram import Bot

from config import Config

from ..logging_setup import log


class NotifierError(RuntimeError):
    """Raised for user-facing notifier errors."""


class BotBaseMixin:
    def __init__(self, config: Config, bot: Bot | None = None):
        if not config.telegram_bot_token and bot is None:
            raise NotifierError("TELEGRAM_BOT_TOKEN is required. Set it in .env")
        self.config = config
        # One client per configuration; callers pass the notifier around
        # instead of reaching for a process-wide bot.
        self.bot = bot if bot is not None else Bot(config.telegram_bot_token)
        # Running typing-indicator loops, awaited on shutdown.
        self._typing_tasks: set[asyncio.Task] = set()

    @classmethod
    def from_token(cls, token: str, **overrides):
        return cls(Config(telegram_bot_token=token, **overrides))

    async def __aenter__(self):
        await self.bot.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop_typing_indicators()
        await self.bot.shutdown()

    @staticmethod
    def _trim_for_log(text: str, max_chars: int = 8000) -> str:
        if len(text) <= max_chars:
            return text
        return text[:max_chars] + "\n...[truncated]"

    @staticmethod
    def _strip_html(text: str) -> str:
        return re.sub(r"<[^>]+>", "", text)

    def _log_bot_message(self, chat_id: int | str, text: str):
        log.info(f"[{chat_id}] Bot: {self._trim_for_log(self._strip_html(text))}")
