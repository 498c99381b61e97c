"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import sys

from telegram.error import TelegramError

from config import Config, load_config
from notifications import NotificationStore

from .bot import NotifierError, TelegramNotifier
from .jobs import notify_job
from .logging_setup import configure_optional_json_logging, log
from .markdown import format_for_telegram
from .prompts import render_md, resolve_runtime_path, runtime_root
from .types import JobResult

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _read_text(value: str) -> str:
    """'-' reads the message body from stdin."""
    if value == "-":
        return sys.stdin.read()
    return value


def _open_store(config: Config) -> NotificationStore:
    return NotificationStore(str(resolve_runtime_path(config.db_path)))


# ── Commands ─────────────────────────────────────────────────


def cmd_format(args: argparse.Namespace, config: Config) -> int:
    max_length = args.max_length or config.telegram_max_message_length
    try:
        chunks = format_for_telegram(_read_text(args.text), max_length)
    except ValueError as e:
        log.error(str(e))
        return EXIT_CONFIG
    for i, chunk in enumerate(chunks, 1):
        if len(chunks) > 1:
            print(f"--- part {i}/{len(chunks)} ({len(chunk)} chars) ---")
        print(chunk)
    return EXIT_OK


async def cmd_send(args: argparse.Namespace, config: Config) -> int:
    chat_ids = args.chat_id or config.telegram_chat_ids
    if not chat_ids:
        log.error("No chat to send to. Pass --chat-id or set TELEGRAM_CHAT_ID in .env")
        return EXIT_CONFIG

    text = _read_text(args.text)
    disable_preview = True if args.no_preview else None
    async with TelegramNotifier(config) as notifier:
        if len(chat_ids) == 1:
            await notifier.send_message(chat_ids[0], text, disable_preview)
            return EXIT_OK
        outcome = await notifier.broadcast(chat_ids, text, disable_preview)
    failed = [chat_id for chat_id, result in outcome.items() if isinstance(result, Exception)]
    return EXIT_FAILURE if failed else EXIT_OK


async def cmd_set_webhook(args: argparse.Namespace, config: Config) -> int:
    url = args.url or config.telegram_webhook_url
    if not url:
        log.error("No webhook URL. Pass --url or set TELEGRAM_WEBHOOK_URL in .env")
        return EXIT_CONFIG
    async with TelegramNotifier(config) as notifier:
        ok = await notifier.set_webhook(url, args.secret or config.telegram_webhook_secret or None)
    return EXIT_OK if ok else EXIT_FAILURE


async def cmd_notify_job(args: argparse.Namespace, config: Config) -> int:
    job = JobResult(
        job_id=args.job_id,
        success=not args.failed,
        summary=_read_text(args.summary),
        pr_url=args.pr_url,
    )
    store = _open_store(config)
    try:
        if not config.telegram_bot_token:
            log.warning("TELEGRAM_BOT_TOKEN not set; notification stored but not sent")
            await notify_job(job, store)
            return EXIT_OK
        async with TelegramNotifier(config) as notifier:
            _, outcome = await notify_job(job, store, notifier)
    finally:
        store.close()
    failed = [chat_id for chat_id, result in outcome.items() if isinstance(result, Exception)]
    return EXIT_FAILURE if failed else EXIT_OK


def cmd_subscribe(args: argparse.Namespace, config: Config) -> int:
    store = _open_store(config)
    try:
        if args.remove:
            if not store.unsubscribe("telegram", args.chat_id):
                log.warning(f"[{args.chat_id}] was not subscribed")
            return EXIT_OK
        store.subscribe("telegram", args.chat_id)
    finally:
        store.close()
    return EXIT_OK


def cmd_render_prompt(args: argparse.Namespace, config: Config) -> int:
    path = resolve_runtime_path(args.path or config.event_handler_md)
    if not path.is_file():
        log.error(f"Prompt file not found: {path}")
        return EXIT_CONFIG
    print(render_md(path))
    return EXIT_OK


# ── Parser ───────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="popebot", description="PopeBot Telegram notifier.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("format", help="Render markdown to Telegram HTML chunks (no network).")
    p.add_argument("text", help="Markdown text, or '-' to read stdin.")
    p.add_argument("--max-length", type=int, default=0, help="Chunk size (default: config).")

    p = sub.add_parser("send", help="Send a markdown message.")
    p.add_argument("text", help="Markdown text, or '-' to read stdin.")
    p.add_argument("--chat-id", action="append", help="Target chat (repeatable).")
    p.add_argument("--no-preview", action="store_true", help="Disable link previews.")

    p = sub.add_parser("set-webhook", help="Register the Telegram webhook URL.")
    p.add_argument("--url", default="", help="HTTPS URL (default: TELEGRAM_WEBHOOK_URL).")
    p.add_argument("--secret", default="", help="Secret token (default: TELEGRAM_WEBHOOK_SECRET).")

    p = sub.add_parser("notify-job", help="Store a job notification and push it to subscribers.")
    p.add_argument("--job-id", required=True)
    p.add_argument("--summary", default="", help="Summary text, or '-' to read stdin.")
    p.add_argument("--pr-url", required=True)
    p.add_argument("--failed", action="store_true", help="Mark the job as having issues.")

    p = sub.add_parser("subscribe", help="Subscribe a Telegram chat to job notifications.")
    p.add_argument("chat_id")
    p.add_argument("--remove", action="store_true", help="Unsubscribe instead.")

    p = sub.add_parser("render-prompt", help="Render a markdown prompt with includes.")
    p.add_argument("path", nargs="?", default="", help="Prompt file (default: EVENT_HANDLER_MD).")

    return parser


_SYNC_COMMANDS = {
    "format": cmd_format,
    "subscribe": cmd_subscribe,
    "render-prompt": cmd_render_prompt,
}
_ASYNC_COMMANDS = {
    "send": cmd_send,
    "set-webhook": cmd_set_webhook,
    "notify-job": cmd_notify_job,
}


def main(argv: list[str] | None = None) -> int:
    """Run the PopeBot CLI."""
    args = build_parser().parse_args(argv)
    config = load_config()
    configure_optional_json_logging(runtime_root())

    try:
        if args.command in _SYNC_COMMANDS:
            return _SYNC_COMMANDS[args.command](args, config)
        return asyncio.run(_ASYNC_COMMANDS[args.command](args, config))
    except NotifierError as e:
        log.error(str(e))
        return EXIT_CONFIG
    except TelegramError as e:
        log.error(f"Telegram request failed: {e}")
        return EXIT_FAILURE
