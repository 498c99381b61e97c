"""
PopeBot — Notification Store
SQLite-backed persistence for job notifications and channel subscriptions.
"""

import json
import logging
import sqlite3
import time
import uuid
from pathlib import Path

from core.types import Notification, Subscription

log = logging.getLogger("popebot.notifications")


def _now_ms() -> int:
    return int(time.time() * 1000)


class NotificationStore:
    """
    Persistent notifications and subscriptions.

    Notifications are what the web UI lists (with a read flag); subscriptions
    are the chat channels that get each notification pushed to them.
    """

    def __init__(self, db_path: str = "popebot.db"):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db = sqlite3.connect(db_path, check_same_thread=False)
        self.db.execute("PRAGMA journal_mode = WAL")
        self._init_db()

    def _init_db(self):
        """Create tables if they don't exist."""
        self.db.executescript("""
            CREATE TABLE IF NOT EXISTS notifications (
                id TEXT PRIMARY KEY,
                notification TEXT NOT NULL,
                payload TEXT NOT NULL,
                read INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_notifications_created
                ON notifications(created_at);

            CREATE TABLE IF NOT EXISTS subscriptions (
                id TEXT PRIMARY KEY,
                platform TEXT NOT NULL,
                channel_id TEXT NOT NULL,
                created_at INTEGER NOT NULL
            );
        """)
        self.db.commit()

    def close(self):
        self.db.close()

    # ── Notifications ─────────────────────────────────────────

    def add_notification(self, notification: str, payload: dict | None = None) -> Notification:
        """Store a notification (unread) and return it."""
        record = Notification(
            id=str(uuid.uuid4()),
            notification=notification,
            payload=dict(payload or {}),
            read=False,
            created_at=_now_ms(),
        )
        self.db.execute(
            "INSERT INTO notifications (id, notification, payload, read, created_at) VALUES (?, ?, ?, 0, ?)",
            (record.id, record.notification, json.dumps(record.payload), record.created_at),
        )
        self.db.commit()
        return record

    def list_notifications(self, limit: int = 50) -> list[Notification]:
        """Newest first."""
        cursor = self.db.execute(
            "SELECT id, notification, payload, read, created_at FROM notifications "
            "ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        )
        return [
            Notification(
                id=row_id,
                notification=text,
                payload=json.loads(payload) if payload else {},
                read=bool(read),
                created_at=created_at,
            )
            for row_id, text, payload, read, created_at in cursor
        ]

    def unread_count(self) -> int:
        return self.db.execute("SELECT COUNT(*) FROM notifications WHERE read = 0").fetchone()[0]

    def mark_all_read(self) -> int:
        """Mark every notification read; returns how many changed."""
        cursor = self.db.execute("UPDATE notifications SET read = 1 WHERE read = 0")
        self.db.commit()
        return cursor.rowcount

    # ── Subscriptions ─────────────────────────────────────────

    def subscribe(self, platform: str, channel_id: str) -> Subscription:
        """Subscribe a channel; subscribing twice returns the existing row."""
        channel_id = str(channel_id)
        row = self.db.execute(
            "SELECT id, platform, channel_id, created_at FROM subscriptions WHERE platform = ? AND channel_id = ?",
            (platform, channel_id),
        ).fetchone()
        if row:
            return Subscription(*row)

        sub = Subscription(id=str(uuid.uuid4()), platform=platform, channel_id=channel_id, created_at=_now_ms())
        self.db.execute(
            "INSERT INTO subscriptions (id, platform, channel_id, created_at) VALUES (?, ?, ?, ?)",
            (sub.id, sub.platform, sub.channel_id, sub.created_at),
        )
        self.db.commit()
        log.info(f"Subscribed {platform} channel {channel_id}")
        return sub

    def unsubscribe(self, platform: str, channel_id: str) -> bool:
        cursor = self.db.execute(
            "DELETE FROM subscriptions WHERE platform = ? AND channel_id = ?",
            (platform, str(channel_id)),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def list_subscriptions(self, platform: str | None = None) -> list[Subscription]:
        sql = "SELECT id, platform, channel_id, created_at FROM subscriptions"
        params: list = []
        if platform:
            sql += " WHERE platform = ?"
            params.append(platform)
        sql += " ORDER BY created_at, rowid"
        return [Subscription(*row) for row in self.db.execute(sql, params)]
