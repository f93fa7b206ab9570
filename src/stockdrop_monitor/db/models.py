"""Database models for the monitoring pipeline.

Favorites and settings are owned by the mobile client; this service only
reads them. Notification log rows are appended by the pipeline and double
as the source of truth for the daily quota. Quotes are never stored.
"""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, UniqueConstraint
from sqlmodel import Field, SQLModel

from stockdrop_monitor.utils import utcnow


class Favorite(SQLModel, table=True):
    """A user's subscription to a symbol."""

    __tablename__ = "st_favorites"
    __table_args__ = (UniqueConstraint("user_id", "symbol", name="uq_favorite_user_symbol"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    symbol: str = Field(index=True, max_length=10)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserSetting(SQLModel, table=True):
    """Per-user preferences; only notification_threshold matters here."""

    __tablename__ = "st_settings"

    user_id: str = Field(primary_key=True)
    notification_threshold: int | None = Field(default=5, ge=0, le=100)
    theme: str = Field(default="system")  # irrelevant to alerting


class NotificationLog(SQLModel, table=True):
    """One row per successfully dispatched push. Append-only."""

    __tablename__ = "st_notifications"
    __table_args__ = (Index("st_notifications_user_date_idx", "user_id", "created_at"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: str = Field(index=True)
    symbol: str = Field(index=True, max_length=10)
    message: str
    price: float
    change_percent: float
    threshold: float
    created_at: datetime = Field(
        default_factory=utcnow, sa_type=DateTime(timezone=True), index=True
    )
