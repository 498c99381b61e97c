"""Pytest configuration and shared fixtures."""

import pytest
from unittest.mock import AsyncMock

from config import Config
from core.bot import TelegramNotifier
from notifications import NotificationStore


@pytest.fixture
def config():
    return Config(telegram_bot_token="123456:TEST-TOKEN")


@pytest.fixture
def bot():
    """Stand-in for telegram.Bot; every API method is an AsyncMock."""
    return AsyncMock()


@pytest.fixture
def notifier(config, bot):
    return TelegramNotifier(config, bot=bot)


@pytest.fixture
def store():
    s = NotificationStore(":memory:")
    yield s
    s.close()
