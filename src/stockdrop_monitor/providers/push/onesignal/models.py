"""Request/response models for the OneSignal notifications API."""
from typing import Any

from pydantic import BaseModel, Field


class OneSignalTagFilter(BaseModel):
    """Selects devices by tag (here: user_id = <user>)."""

    field: str = "tag"
    key: str = "user_id"
    relation: str = "="
    value: str


class OneSignalNotification(BaseModel):
    """Body of POST /notifications."""

    app_id: str
    filters: list[OneSignalTagFilter]
    headings: dict[str, str]
    contents: dict[str, str]
    data: dict[str, str] = Field(default_factory=dict)
    android_accent_color: str | None = None
    small_icon: str | None = None
    large_icon: str | None = None


class OneSignalResponse(BaseModel):
    """Either a delivery id or an error list (sometimes a dict of lists)."""

    id: str | None = None
    errors: list[Any] | dict[str, Any] | None = None

    def error_messages(self) -> list[str]:
        if not self.errors:
            return []
        if isinstance(self.errors, dict):
            return [f"{key}: {value}" for key, value in self.errors.items()]
        return [str(e) for e in self.errors]
