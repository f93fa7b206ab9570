"""Persists one log row per successfully dispatched notification."""
import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from stockdrop_monitor.db.models import NotificationLog
from stockdrop_monitor.schemas import CandidateAlert
from stockdrop_monitor.services.protocols import AlertStore
from stockdrop_monitor.utils import as_utc, utcnow

logger = logging.getLogger(__name__)


class NotificationRecorder:
    """Writes NotificationLog rows. Only call after a confirmed send.

    Write failures are logged and reported, never retried: the push is already
    out, so a retry path could only produce duplicates.
    """

    def __init__(self, store: AlertStore, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    async def record(
        self,
        alert: CandidateAlert,
        message: str,
        sent_at: datetime | None = None,
    ) -> NotificationLog | None:
        """Insert the log row; returns None if the write failed."""
        row = NotificationLog(
            user_id=alert.user_id,
            symbol=alert.symbol,
            message=message,
            price=alert.quote.price,
            change_percent=alert.quote.change_percent,
            threshold=alert.threshold,
            created_at=as_utc(sent_at or self._clock()),
        )
        try:
            saved = await asyncio.to_thread(self._store.add_notification, row)
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Failed to log notification for user %s (%s); push was sent, needs reconciliation",
                alert.user_id,
                alert.symbol,
            )
            return None
        logger.info("Notification logged for user %s (%s)", alert.user_id, alert.symbol)
        return saved
