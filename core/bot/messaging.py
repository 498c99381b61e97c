"""Telegram message chunking/sending."""

from __future__ import annotations

import asyncio
import html

from telegram import LinkPreviewOptions, Message
from telegram.constants import ParseMode
from telegram.error import BadRequest

from ..logging_setup import log
from ..markdown import format_for_telegram, smart_split, strip_html_comments


class BotMessagingMixin:
    async def send_message(
        self,
        chat_id: int | str,
        text: str,
        disable_preview: bool | None = None,
    ) -> Message | None:
        """Convert markdown to Telegram HTML and send it, split if needed.

        Returns the last message sent, or None if the text rendered to nothing.
        """
        chunks = format_for_telegram(text, self.config.telegram_max_message_length)
        return await self._deliver(chat_id, chunks, disable_preview, source_len=len(text or ""))

    async def send_html(
        self,
        chat_id: int | str,
        html_text: str,
        disable_preview: bool | None = None,
    ) -> Message | None:
        """Send text that is already Telegram HTML (no markdown conversion)."""
        chunks = smart_split(strip_html_comments(html_text), self.config.telegram_max_message_length)
        return await self._deliver(chat_id, chunks, disable_preview, source_len=len(html_text or ""))

    async def broadcast(
        self,
        chat_ids: list[int | str],
        text: str,
        disable_preview: bool | None = None,
        as_html: bool = False,
    ) -> dict[str, Message | Exception | None]:
        """Send the same text to several chats concurrently.

        Each chat still receives its own chunks in order. Per-chat failures
        are collected in the result rather than cancelling the other sends.
        """
        send = self.send_html if as_html else self.send_message
        unique_ids = list(dict.fromkeys(str(c) for c in chat_ids))
        results = await asyncio.gather(
            *(send(chat_id, text, disable_preview) for chat_id in unique_ids),
            return_exceptions=True,
        )
        outcome: dict[str, Message | Exception | None] = {}
        for chat_id, result in zip(unique_ids, results):
            if isinstance(result, Exception):
                log.error(f"[{chat_id}] Failed to deliver message: {result}")
            outcome[chat_id] = result
        return outcome

    async def _deliver(
        self,
        chat_id: int | str,
        chunks: list[str],
        disable_preview: bool | None,
        source_len: int = 0,
    ) -> Message | None:
        """Send chunks strictly in order, awaiting each before the next."""
        if disable_preview is None:
            disable_preview = self.config.telegram_disable_preview

        last_message = None
        # Telegram rejects empty or blank text.
        chunks = [c for c in chunks if c.strip()]
        for chunk in chunks:
            self._log_bot_message(chat_id, chunk)
            last_message = await self._send_chunk(chat_id, chunk, disable_preview)

        if len(chunks) > 1:
            log.info(f"[{chat_id}] Long message split into {len(chunks)} parts ({source_len} chars)")

        return last_message

    async def _send_chunk(self, chat_id: int | str, chunk: str, disable_preview: bool) -> Message:
        """Send one chunk with HTML, falling back to plain text if Telegram can't parse it."""
        preview = LinkPreviewOptions(is_disabled=disable_preview)
        try:
            return await self.bot.send_message(
                chat_id=chat_id,
                text=chunk,
                parse_mode=ParseMode.HTML,
                link_preview_options=preview,
            )
        except BadRequest as e:
            if "parse entities" not in str(e).lower():
                raise
            log.warning(f"[{chat_id}] Telegram rejected HTML ({e}); resending as plain text")

        plain = html.unescape(self._strip_html(chunk))
        return await self.bot.send_message(chat_id=chat_id, text=plain, link_preview_options=preview)
