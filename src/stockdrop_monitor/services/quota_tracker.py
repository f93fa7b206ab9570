"""Per-user daily notification quota, loaded once per cycle."""
import asyncio
import logging
from collections import defaultdict
from datetime import datetime

from stockdrop_monitor.config import DAILY_NOTIFICATION_LIMIT
from stockdrop_monitor.services.protocols import AlertStore
from stockdrop_monitor.utils import utc_day_bounds

logger = logging.getLogger(__name__)


class QuotaTracker:
    """In-memory view of today's notification counts.

    Reservations are provisional: nothing is written to the store here, and a
    reserved slot is never released, even if the send later fails.
    """

    def __init__(self, counts: dict[str, int] | None = None, limit: int = DAILY_NOTIFICATION_LIMIT) -> None:
        self._counts: defaultdict[str, int] = defaultdict(int, counts or {})
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.limit = limit

    @classmethod
    async def load(
        cls,
        store: AlertStore,
        now: datetime,
        limit: int = DAILY_NOTIFICATION_LIMIT,
    ) -> "QuotaTracker":
        """Count each user's notifications for the UTC day containing `now`."""
        start, end = utc_day_bounds(now)
        counts = await asyncio.to_thread(store.count_notifications, start, end)
        logger.debug("Loaded notification counts for %d users (%s .. %s)", len(counts), start, end)
        return cls(counts, limit)

    def count(self, user_id: str) -> int:
        return self._counts.get(user_id, 0)

    def remaining(self, user_id: str) -> int:
        return max(0, self.limit - self.count(user_id))

    async def try_reserve(self, user_id: str) -> bool:
        """Take one slot for `user_id` if below the limit."""
        async with self._locks[user_id]:
            if self._counts[user_id] >= self.limit:
                return False
            self._counts[user_id] += 1
            return True
