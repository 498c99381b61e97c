"""Shared datatypes for PopeBot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class JobResult:
    job_id: str
    success: bool
    summary: str = ""
    pr_url: str = ""


@dataclass
class Notification:
    id: str
    notification: str
    payload: dict[str, Any] = field(default_factory=dict)
    read: bool = False
    created_at: int = 0


@dataclass
class Subscription:
    id: str
    platform: str
    channel_id: str
    created_at: int = 0
