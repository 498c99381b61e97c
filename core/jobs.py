"""Job completion notifications."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from .logging_setup import log
from .markdown import escape_html
from .types import JobResult, Notification

if TYPE_CHECKING:
    from notifications import NotificationStore

    from .bot import TelegramNotifier


def format_job_notification(job: JobResult) -> str:
    """Format a job result as Telegram HTML."""
    emoji = "✅" if job.success else "⚠️"
    status = "complete" if job.success else "had issues"
    short_id = job.job_id[:8]
    pr_url = escape_html(job.pr_url).replace('"', "&quot;")

    return (
        f"{emoji} <b>Job {escape_html(short_id)}</b> {status}\n\n"
        f"{escape_html(job.summary)}\n\n"
        f'<a href="{pr_url}">View PR</a>'
    )


async def notify_job(
    job: JobResult,
    store: NotificationStore,
    notifier: TelegramNotifier | None = None,
) -> tuple[Notification, dict]:
    """Record a job notification and push it to every Telegram subscriber.

    Recipients are the stored telegram subscriptions plus the configured
    default chats. Without a notifier the notification is only stored.
    """
    status = "complete" if job.success else "had issues"
    record = store.add_notification(f"Job {job.job_id[:8]} {status}: {job.summary}", asdict(job))
    log.info(f"Job {job.job_id[:8]} {status}")

    if notifier is None:
        return record, {}

    recipients = [s.channel_id for s in store.list_subscriptions("telegram")]
    recipients.extend(notifier.config.telegram_chat_ids)
    if not recipients:
        log.warning("No Telegram subscribers for job notifications")
        return record, {}

    outcome = await notifier.broadcast(recipients, format_job_notification(job), as_html=True)
    return record, outcome
