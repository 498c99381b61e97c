"""Tests for the SQLite notification store."""

from notifications import NotificationStore


class TestNotifications:
    def test_add_and_list_newest_first(self, store):
        store.add_notification("first")
        store.add_notification("second", {"job_id": "abc"})

        items = store.list_notifications()
        assert [n.notification for n in items] == ["second", "first"]
        assert items[0].payload == {"job_id": "abc"}
        assert items[1].payload == {}
        assert not items[0].read

    def test_limit(self, store):
        for i in range(5):
            store.add_notification(f"n{i}")
        assert len(store.list_notifications(limit=3)) == 3

    def test_mark_all_read(self, store):
        store.add_notification("a")
        store.add_notification("b")
        assert store.unread_count() == 2
        assert store.mark_all_read() == 2
        assert store.unread_count() == 0
        assert store.mark_all_read() == 0
        assert all(n.read for n in store.list_notifications())


class TestSubscriptions:
    def test_subscribe_is_idempotent(self, store):
        first = store.subscribe("telegram", 123)
        again = store.subscribe("telegram", "123")
        assert first.id == again.id
        assert first.channel_id == "123"
        assert len(store.list_subscriptions()) == 1

    def test_filter_by_platform(self, store):
        store.subscribe("telegram", "1")
        store.subscribe("slack", "C1")
        assert [s.channel_id for s in store.list_subscriptions("telegram")] == ["1"]
        assert len(store.list_subscriptions()) == 2

    def test_unsubscribe(self, store):
        store.subscribe("telegram", "1")
        assert store.unsubscribe("telegram", "1") is True
        assert store.unsubscribe("telegram", "1") is False
        assert store.list_subscriptions() == []


class TestPersistence:
    def test_survives_reopen(self, tmp_path):
        db_path = tmp_path / "data" / "popebot.db"
        s = NotificationStore(str(db_path))
        s.add_notification("kept")
        s.subscribe("telegram", "9")
        s.close()

        s = NotificationStore(str(db_path))
        try:
            assert [n.notification for n in s.list_notifications()] == ["kept"]
            assert [sub.channel_id for sub in s.list_subscriptions()] == ["9"]
        finally:
            s.close()
