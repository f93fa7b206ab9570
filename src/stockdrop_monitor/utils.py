"""Shared utilities for the monitoring pipeline."""
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    """Convert to aware UTC; naive values (e.g. read back from SQLite) are assumed UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return [start, end) of the UTC calendar day containing `now`."""
    start = as_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def chunked(items: Iterable[str], size: int) -> Iterator[list[str]]:
    """Yield consecutive lists of at most `size` items."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    chunk: list[str] = []
    for item in items:
        chunk.append(item)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def normalize_symbol(symbol: str) -> str:
    """Normalize a stock symbol (strip + uppercase)."""
    return symbol.strip().upper()


def configure_logging(level: str = "INFO") -> None:
    """Basic process-wide logging for the server and CLI entry points."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def parse_timestamp(ts: float | None) -> datetime:
    """Convert optional Unix timestamp (seconds) to aware UTC; fallback to now."""
    if ts is None:
        return utcnow()
    return datetime.fromtimestamp(ts, tz=timezone.utc)
