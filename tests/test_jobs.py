"""Tests for job notification formatting and delivery."""

import pytest
from telegram.constants import ParseMode

from config import Config
from core.bot import TelegramNotifier
from core.jobs import format_job_notification, notify_job
from core.types import JobResult


def _job(success=True):
    return JobResult(
        job_id="1234567890abcdef",
        success=success,
        summary="All <good> & done",
        pr_url="https://github.com/o/r/pull/1",
    )


class TestFormatJobNotification:
    def test_success(self):
        assert format_job_notification(_job()) == (
            "✅ <b>Job 12345678</b> complete\n\n"
            "All &lt;good&gt; &amp; done\n\n"
            '<a href="https://github.com/o/r/pull/1">View PR</a>'
        )

    def test_failure(self):
        text = format_job_notification(_job(success=False))
        assert text.startswith("⚠️ <b>Job 12345678</b> had issues")

    def test_quote_in_url_cannot_break_attribute(self):
        job = JobResult(job_id="abc", success=True, pr_url='https://x.y/"onclick')
        assert 'href="https://x.y/&quot;onclick"' in format_job_notification(job)


class TestNotifyJob:
    @pytest.mark.asyncio
    async def test_store_only(self, store):
        record, outcome = await notify_job(_job(), store)
        assert outcome == {}
        assert store.unread_count() == 1
        assert record.payload["job_id"] == "1234567890abcdef"
        assert record.notification.startswith("Job 12345678 complete")

    @pytest.mark.asyncio
    async def test_sends_to_subscribers_and_default_chats(self, store, bot):
        notifier = TelegramNotifier(Config(telegram_bot_token="1:x", telegram_chat_ids=["222", "111"]), bot=bot)
        store.subscribe("telegram", "111")
        store.subscribe("slack", "C123")

        _, outcome = await notify_job(_job(), store, notifier)

        assert set(outcome) == {"111", "222"}
        assert bot.send_message.await_count == 2
        for call in bot.send_message.await_args_list:
            assert call.kwargs["text"] == format_job_notification(_job())
            assert call.kwargs["parse_mode"] == ParseMode.HTML

    @pytest.mark.asyncio
    async def test_no_recipients(self, store, notifier, bot):
        _, outcome = await notify_job(_job(), store, notifier)
        assert outcome == {}
        bot.send_message.assert_not_awaited()
