"""Subscription index: which users watch which symbols, at what threshold."""
import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from stockdrop_monitor.config import DEFAULT_THRESHOLD
from stockdrop_monitor.db.models import Favorite, UserSetting
from stockdrop_monitor.schemas import Subscriber
from stockdrop_monitor.services.protocols import AlertStore
from stockdrop_monitor.utils import normalize_symbol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubscriptionIndex:
    """Symbol -> subscribers grouping for one cycle."""

    groups: dict[str, list[Subscriber]] = field(default_factory=dict)
    favorite_entries: int = 0

    @property
    def symbols(self) -> list[str]:
        """Unique symbols, in group order."""
        return list(self.groups)

    def __bool__(self) -> bool:
        return bool(self.groups)


def resolve_threshold(raw: int | float | None, default: int = DEFAULT_THRESHOLD) -> int:
    """Effective threshold for a stored value; unset (None or 0) means `default`."""
    if not raw:
        return default
    return int(abs(raw))


def build_subscription_index(
    favorites: Iterable[Favorite],
    settings: Iterable[UserSetting],
    default_threshold: int = DEFAULT_THRESHOLD,
) -> SubscriptionIndex:
    """Group favorites by symbol, attaching each user's threshold.

    No symbol validation happens here; unknown symbols just never get a quote.
    """
    thresholds = {
        s.user_id: resolve_threshold(s.notification_threshold, default_threshold)
        for s in settings
    }
    groups: dict[str, list[Subscriber]] = {}
    entries = 0
    for fav in favorites:
        entries += 1
        symbol = normalize_symbol(fav.symbol)
        if not symbol:
            continue
        subscribers = groups.setdefault(symbol, [])
        if any(sub.user_id == fav.user_id for sub in subscribers):
            continue
        subscribers.append(
            Subscriber(
                user_id=fav.user_id,
                threshold=thresholds.get(fav.user_id, default_threshold),
            )
        )
    return SubscriptionIndex(groups=groups, favorite_entries=entries)


class SubscriptionIndexLoader:
    """Loads favorites and settings from the store and builds the index."""

    def __init__(self, store: AlertStore, default_threshold: int = DEFAULT_THRESHOLD) -> None:
        self._store = store
        self._default_threshold = default_threshold

    async def load(self) -> SubscriptionIndex:
        """Build the index. Favorites failures propagate; settings failures fall back to defaults."""
        favorites = await asyncio.to_thread(self._store.list_favorites)
        if not favorites:
            logger.info("No favorite stocks found")
            return SubscriptionIndex()
        logger.info("Found %d favorite entries", len(favorites))

        try:
            settings = await asyncio.to_thread(self._store.list_settings)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(
                "Failed to fetch user settings, using default threshold %d%%: %s",
                self._default_threshold,
                exc,
            )
            settings = []

        index = build_subscription_index(favorites, settings, self._default_threshold)
        logger.info("Monitoring %d unique symbols", len(index.groups))
        return index
