"""Protocols for the stores the pipeline depends on."""
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from stockdrop_monitor.db.models import Favorite, NotificationLog, UserSetting


class AlertStore(Protocol):
    """Relational store for favorites, settings and the notification log.

    Blocking methods; services call them through asyncio.to_thread.
    """

    def list_favorites(self) -> Sequence[Favorite]:
        """All favorites ordered by symbol."""
        ...

    def list_settings(self) -> Sequence[UserSetting]:
        ...

    def count_notifications(self, start: datetime, end: datetime) -> dict[str, int]:
        """Per-user notification counts with created_at in [start, end)."""
        ...

    def add_notification(self, record: NotificationLog) -> NotificationLog:
        ...
