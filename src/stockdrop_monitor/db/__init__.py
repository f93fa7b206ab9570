"""Database package: models, sessions and the alert store."""
from stockdrop_monitor.db.models import Favorite, NotificationLog, UserSetting
from stockdrop_monitor.db.sessions import create_db_engine, get_session, init_db
from stockdrop_monitor.db.store import SqlAlertStore

__all__ = [
    "Favorite",
    "NotificationLog",
    "SqlAlertStore",
    "UserSetting",
    "create_db_engine",
    "get_session",
    "init_db",
]
