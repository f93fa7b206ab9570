"""Cycle orchestrator: runs one monitoring cycle and summarizes it.

Idle -> LoadingSubscriptions -> FetchingQuotes -> Matching -> Dispatching
-> Summarizing -> Idle, or Failed on any unhandled error. A summary is
always returned, carrying whatever counts were accumulated.
"""
import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from stockdrop_monitor.config import Settings
from stockdrop_monitor.providers.core import ConfigurationError
from stockdrop_monitor.providers.push import PushProviderABC
from stockdrop_monitor.schemas import (CycleState, CycleStatus, CycleSummary,
                                       DispatchOutcome, DispatchResult,
                                       ProcessedCounts)
from stockdrop_monitor.services.alert_matcher import match_alerts
from stockdrop_monitor.services.dispatcher import NotificationDispatcher
from stockdrop_monitor.services.protocols import AlertStore
from stockdrop_monitor.services.quota_tracker import QuotaTracker
from stockdrop_monitor.services.quote_fetcher import QuoteBatchFetcher
from stockdrop_monitor.services.recorder import NotificationRecorder
from stockdrop_monitor.services.subscription_index import SubscriptionIndexLoader
from stockdrop_monitor.utils import utcnow

logger = logging.getLogger(__name__)

_OUTCOME_COUNTERS: dict[DispatchOutcome, tuple[str, ...]] = {
    DispatchOutcome.SENT: ("alerts_sent",),
    DispatchOutcome.SENT_UNRECORDED: ("alerts_sent", "recording_errors"),
    DispatchOutcome.FAILED: ("dispatch_failures",),
    DispatchOutcome.SUPPRESSED: ("suppressed_by_quota",),
    DispatchOutcome.CANCELLED: ("cancelled_dispatches",),
}


def tally(counts: ProcessedCounts, result: DispatchResult) -> None:
    """Add one dispatch result to the cycle counters."""
    for name in _OUTCOME_COUNTERS[result.outcome]:
        setattr(counts, name, getattr(counts, name) + 1)


class CycleOrchestrator:
    """Sequences the pipeline stages for one invocation.

    Built once per process by the container; `run` may be called repeatedly,
    also concurrently. Per-run state lives on the returned CycleSummary only.
    Running twice on the same day is safe because the quota is per user per
    UTC day, not per cycle.
    """

    def __init__(
        self,
        settings: Settings,
        store: AlertStore,
        subscriptions: SubscriptionIndexLoader,
        fetcher: QuoteBatchFetcher,
        push_provider: PushProviderABC,
        recorder: NotificationRecorder,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._settings = settings
        self._store = store
        self._subscriptions = subscriptions
        self._fetcher = fetcher
        self._push = push_provider
        self._recorder = recorder
        self._clock = clock

    @staticmethod
    def _enter(summary: CycleSummary, state: CycleState) -> None:
        summary.state = state
        logger.debug("Cycle state -> %s", state.value)

    async def run(self, cancel_event: asyncio.Event | None = None) -> CycleSummary:
        """Run one cycle. Never raises; failures come back as a failed summary."""
        summary = CycleSummary(started_at=self._clock())
        counts = summary.processed
        logger.info("Starting stock monitoring cycle")
        try:
            self._settings.require_credentials()

            self._enter(summary, CycleState.LOADING_SUBSCRIPTIONS)
            index = await self._subscriptions.load()
            counts.favorite_entries = index.favorite_entries
            counts.unique_symbols = len(index.symbols)
            if not index:
                summary.message = "No favorite stocks to monitor"
                return self._finish(summary)
            if _cancelled(cancel_event):
                return self._finish(summary, cancelled=True)

            self._enter(summary, CycleState.FETCHING_QUOTES)
            fetched = await self._fetcher.fetch(index.symbols)
            counts.stock_prices_retrieved = len(fetched.quotes)
            counts.failed_chunks = fetched.failed_chunks
            if not fetched.quotes:
                summary.message = "No stock prices available"
                return self._finish(summary)

            self._enter(summary, CycleState.MATCHING)
            candidates = match_alerts(index.groups, fetched.quotes)
            counts.notifications = len(candidates)
            logger.info("Identified %d candidate alerts", len(candidates))

            self._enter(summary, CycleState.DISPATCHING)
            if candidates:
                quota = await QuotaTracker.load(
                    self._store,
                    self._clock(),
                    self._settings.monitor.daily_notification_limit,
                )
                dispatcher = NotificationDispatcher(
                    self._push,
                    quota,
                    self._recorder,
                    max_concurrency=self._settings.push.max_concurrency,
                    timeout=self._settings.monitor.request_timeout_seconds,
                )
                await dispatcher.dispatch_all(
                    candidates,
                    cancel_event=cancel_event,
                    on_result=lambda result: tally(counts, result),
                )

            summary.message = "Stock monitoring completed successfully"
            return self._finish(summary, cancelled=counts.cancelled_dispatches > 0)
        except ConfigurationError as exc:
            logger.error("Configuration error, cycle aborted: %s", exc)
            return self._fail(summary, str(exc))
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Error in stock monitoring cycle")
            return self._fail(summary, str(exc) or exc.__class__.__name__)

    def _finish(self, summary: CycleSummary, *, cancelled: bool = False) -> CycleSummary:
        """Close out a cycle; `cancelled` means work was skipped because of the cancel event."""
        self._enter(summary, CycleState.SUMMARIZING)
        if cancelled:
            summary.status = CycleStatus.CANCELLED
            summary.message = "Stock monitoring cancelled before completion"
        else:
            summary.status = CycleStatus.COMPLETED
        summary.finished_at = self._clock()
        counts = summary.processed
        logger.info(
            "Stock monitoring %s. Sent %d alerts (%d suppressed by quota, %d failed, %d unrecorded)",
            summary.status.value,
            counts.alerts_sent,
            counts.suppressed_by_quota,
            counts.dispatch_failures,
            counts.recording_errors,
        )
        self._enter(summary, CycleState.IDLE)
        return summary

    def _fail(self, summary: CycleSummary, error: str) -> CycleSummary:
        self._enter(summary, CycleState.FAILED)
        summary.status = CycleStatus.FAILED
        summary.error = error
        summary.message = ""
        summary.finished_at = self._clock()
        return summary


def _cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()
