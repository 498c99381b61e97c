"""Webhook, reaction, typing-indicator and file-download helpers."""

from __future__ import annotations

import asyncio
import random
from typing import Callable

from telegram import ReactionTypeEmoji
from telegram.constants import ChatAction
from telegram.error import TelegramError

from ..constants import DEFAULT_REACTION, TYPING_REFRESH_MAX_SEC, TYPING_REFRESH_MIN_SEC
from ..logging_setup import log
from .base import NotifierError


class BotActionsMixin:
    async def set_webhook(self, webhook_url: str, secret_token: str | None = None) -> bool:
        """Point Telegram at an HTTPS URL for incoming updates."""
        kwargs = {}
        if secret_token:
            kwargs["secret_token"] = secret_token
        ok = await self.bot.set_webhook(url=webhook_url, **kwargs)
        log.info(f"Webhook set to {webhook_url}: {ok}")
        return ok

    async def react_to_message(self, chat_id: int | str, message_id: int, emoji: str = DEFAULT_REACTION):
        await self.bot.set_message_reaction(
            chat_id=chat_id,
            message_id=message_id,
            reaction=[ReactionTypeEmoji(emoji=emoji)],
        )
        log.info(f"[{chat_id}] Added reaction {emoji} to message {message_id}")

    # ── Typing Indicator ─────────────────────────────────────

    async def _send_typing(self, chat_id: int | str):
        try:
            await self.bot.send_chat_action(chat_id=chat_id, action=ChatAction.TYPING)
        except Exception as e:
            # Cosmetic; never let it fail a send.
            log.debug(f"[{chat_id}] Typing indicator failed: {e}")

    async def _typing_loop(self, chat_id: int | str):
        while True:
            await self._send_typing(chat_id)
            await asyncio.sleep(random.uniform(TYPING_REFRESH_MIN_SEC, TYPING_REFRESH_MAX_SEC))

    def start_typing_indicator(self, chat_id: int | str) -> Callable[[], None]:
        """Keep the "typing…" status alive until the returned function is called.

        Telegram expires the status after ~5s, so it is re-sent with random
        gaps. Must be called from a running event loop. Stopped loops are
        reaped by stop_typing_indicators(), which the async context exit
        calls.
        """
        task = asyncio.get_running_loop().create_task(self._typing_loop(chat_id))
        self._typing_tasks.add(task)
        task.add_done_callback(self._typing_tasks.discard)

        def stop():
            task.cancel()

        return stop

    async def stop_typing_indicators(self):
        """Cancel every typing loop and wait for them to finish."""
        tasks = list(self._typing_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ── Files ────────────────────────────────────────────────

    async def download_file(self, file_id: str) -> tuple[bytes, str]:
        """Download a file from Telegram servers. Returns (data, filename)."""
        try:
            tg_file = await self.bot.get_file(file_id)
        except TelegramError as e:
            raise NotifierError(f"Telegram API error: {e}") from e
        if not tg_file.file_path:
            raise NotifierError(f"Telegram API error: no file path for {file_id}")

        data = await tg_file.download_as_bytearray()
        filename = tg_file.file_path.rstrip("/").split("/")[-1]
        return bytes(data), filename
