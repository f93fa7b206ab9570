"""Pydantic schemas for runtime and API use. Not persisted to DB."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stockdrop_monitor.utils import utcnow


class Quote(BaseModel):
    """A fresh price snapshot for one symbol. Never persisted."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0  # signed; negative = decline
    volume: float | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class Subscriber(BaseModel):
    """One (user, threshold) entry inside a symbol's subscription group."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    threshold: int


class CandidateAlert(BaseModel):
    """A (user, symbol, quote) triple that passed the threshold test."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    symbol: str
    threshold: int
    quote: Quote


class DispatchOutcome(str, Enum):
    SENT = "sent"
    SENT_UNRECORDED = "sent_unrecorded"  # pushed, but the log write failed
    FAILED = "failed"
    SUPPRESSED = "suppressed"  # daily quota exhausted
    CANCELLED = "cancelled"


class PushMessage(BaseModel):
    """A formatted notification targeted at one user."""

    user_id: str
    title: str
    body: str
    data: dict[str, str] = Field(default_factory=dict)


class PushResult(BaseModel):
    """Push provider acknowledgement."""

    success: bool
    delivery_id: str | None = None
    errors: list[str] = Field(default_factory=list)


class DispatchResult(BaseModel):
    alert: CandidateAlert
    outcome: DispatchOutcome
    message: str | None = None
    error: str | None = None


class CycleState(str, Enum):
    IDLE = "idle"
    LOADING_SUBSCRIPTIONS = "loading_subscriptions"
    FETCHING_QUOTES = "fetching_quotes"
    MATCHING = "matching"
    DISPATCHING = "dispatching"
    SUMMARIZING = "summarizing"
    FAILED = "failed"


class CycleStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ProcessedCounts(BaseModel):
    """Per-cycle counters, serialized camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    favorite_entries: int = 0
    unique_symbols: int = 0
    stock_prices_retrieved: int = 0
    failed_chunks: int = 0
    notifications: int = 0  # candidate alerts identified
    alerts_sent: int = 0
    suppressed_by_quota: int = 0
    dispatch_failures: int = 0
    recording_errors: int = 0
    cancelled_dispatches: int = 0


class CycleSummary(BaseModel):
    """Structured result of one monitoring cycle."""

    status: CycleStatus = CycleStatus.COMPLETED
    state: CycleState = CycleState.IDLE
    message: str = ""
    error: str | None = None
    processed: ProcessedCounts = Field(default_factory=ProcessedCounts)
    started_at: datetime = Field(default_factory=utcnow)
    finished_at: datetime | None = None

    @property
    def success(self) -> bool:
        return self.status is not CycleStatus.FAILED


class MonitorRunResponse(BaseModel):
    """JSON body returned by the cycle invocation endpoint."""

    success: bool
    status: CycleStatus
    message: str | None = None
    error: str | None = None
    processed: ProcessedCounts
    timestamp: datetime

    @classmethod
    def from_summary(cls, summary: CycleSummary) -> "MonitorRunResponse":
        return cls(
            success=summary.success,
            status=summary.status,
            message=summary.message or None,
            error=summary.error,
            processed=summary.processed,
            timestamp=summary.finished_at or utcnow(),
        )


__all__ = [
    "CandidateAlert",
    "CycleState",
    "CycleStatus",
    "CycleSummary",
    "DispatchOutcome",
    "DispatchResult",
    "MonitorRunResponse",
    "ProcessedCounts",
    "PushMessage",
    "PushResult",
    "Quote",
    "Subscriber",
]
