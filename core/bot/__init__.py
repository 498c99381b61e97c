"""Composed Telegram notifier class built from focused mixins."""

from __future__ import annotations

from .actions import BotActionsMixin
from .base import BotBaseMixin, NotifierError
from .messaging import BotMessagingMixin


class TelegramNotifier(
    BotMessagingMixin,
    BotActionsMixin,
    BotBaseMixin,
):
    """Outbound Telegram client: formatting, ordered delivery and chat actions."""

    pass


__all__ = ["NotifierError", "TelegramNotifier"]
