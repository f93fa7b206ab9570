"""SQL-backed access to favorites, settings and the notification log."""
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlmodel import select

from stockdrop_monitor.db.models import Favorite, NotificationLog, UserSetting
from stockdrop_monitor.db.sessions import get_session
from stockdrop_monitor.utils import as_utc


class SqlAlertStore:
    """Blocking store API; async callers wrap calls in asyncio.to_thread."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def list_favorites(self) -> list[Favorite]:
        """All favorites, ordered by symbol."""
        with get_session(self._engine) as session:
            stmt = select(Favorite).order_by(Favorite.symbol, Favorite.created_at)
            rows = session.exec(stmt).all()
            session.expunge_all()
            return list(rows)

    def list_settings(self) -> list[UserSetting]:
        with get_session(self._engine) as session:
            rows = session.exec(select(UserSetting)).all()
            session.expunge_all()
            return list(rows)

    def count_notifications(self, start: datetime, end: datetime) -> dict[str, int]:
        """Notification counts per user with created_at in [start, end)."""
        with get_session(self._engine) as session:
            stmt = (
                select(NotificationLog.user_id, func.count(NotificationLog.id))
                .where(NotificationLog.created_at >= as_utc(start))
                .where(NotificationLog.created_at < as_utc(end))
                .group_by(NotificationLog.user_id)
            )
            return {user_id: int(count) for user_id, count in session.exec(stmt).all()}

    def add_notification(self, record: NotificationLog) -> NotificationLog:
        """Insert one notification log row."""
        with get_session(self._engine) as session:
            session.add(record)
            session.flush()
            session.refresh(record)
            session.expunge(record)
            return record
