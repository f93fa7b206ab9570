"""Notification dispatch: quota reservation, push delivery, recording."""
import asyncio
import logging
from collections.abc import Callable, Sequence

from stockdrop_monitor.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from stockdrop_monitor.providers.push import PushProviderABC
from stockdrop_monitor.schemas import (CandidateAlert, DispatchOutcome,
                                       DispatchResult, PushMessage)
from stockdrop_monitor.services.quota_tracker import QuotaTracker
from stockdrop_monitor.services.recorder import NotificationRecorder
from stockdrop_monitor.utils import utcnow

logger = logging.getLogger(__name__)

ALERT_TYPE = "stock_alert"

ResultCallback = Callable[[DispatchResult], None]


def format_alert_message(alert: CandidateAlert) -> PushMessage:
    """Title and body for a price-drop alert, e.g. "AAPL dropped 5.23% to $187.50"."""
    quote = alert.quote
    body = f"{alert.symbol} dropped {abs(quote.change_percent):.2f}% to ${quote.price:.2f}"
    return PushMessage(
        user_id=alert.user_id,
        title=f"{alert.symbol} Price Alert",
        body=body,
        data={
            "type": ALERT_TYPE,
            "symbol": alert.symbol,
            "user_id": alert.user_id,
            "price": str(quote.price),
            "change_percent": str(quote.change_percent),
            "timestamp": utcnow().isoformat().replace("+00:00", "Z"),
        },
    )


class NotificationDispatcher:
    """Sends candidate alerts, serialized per user and concurrent across users.

    A quota slot is reserved before each send and is not given back when the
    send fails.
    """

    def __init__(
        self,
        push_provider: PushProviderABC,
        quota: QuotaTracker,
        recorder: NotificationRecorder,
        *,
        max_concurrency: int = 5,
        timeout: float = 12.0,
    ) -> None:
        self._push = push_provider
        self._quota = quota
        self._recorder = recorder
        self._max_concurrency = max(1, max_concurrency)
        self._timeout = timeout
        self._error_mapper = ProviderErrorMapper(api_name="Push provider")

    async def dispatch(self, alert: CandidateAlert) -> DispatchResult:
        """Reserve, send and record a single alert. Never raises for provider failures."""
        if not await self._quota.try_reserve(alert.user_id):
            logger.info("User %s has reached daily notification limit", alert.user_id)
            return DispatchResult(alert=alert, outcome=DispatchOutcome.SUPPRESSED)

        message = format_alert_message(alert)
        logger.info("Sending push notification to user %s for %s", alert.user_id, alert.symbol)
        try:
            result = await asyncio.wait_for(self._push.send(message), timeout=self._timeout)
        except PROVIDER_EXCEPTIONS as exc:
            reason = self._error_mapper.describe(exc, target=f"user {alert.user_id}")
            logger.warning("Push failed: %s", reason)
            return DispatchResult(
                alert=alert, outcome=DispatchOutcome.FAILED, message=message.body, error=reason
            )

        if not result.success:
            return DispatchResult(
                alert=alert,
                outcome=DispatchOutcome.FAILED,
                message=message.body,
                error="; ".join(result.errors) or "push rejected",
            )
        logger.info("Push notification sent. ID: %s", result.delivery_id)

        saved = await self._recorder.record(alert, message.body)
        if saved is None:
            return DispatchResult(
                alert=alert,
                outcome=DispatchOutcome.SENT_UNRECORDED,
                message=message.body,
                error="notification log write failed",
            )
        return DispatchResult(alert=alert, outcome=DispatchOutcome.SENT, message=message.body)

    async def dispatch_all(
        self,
        alerts: Sequence[CandidateAlert],
        *,
        cancel_event: asyncio.Event | None = None,
        on_result: ResultCallback | None = None,
    ) -> list[DispatchResult]:
        """Dispatch every alert; one sequential worker per user.

        Once `cancel_event` is set no new send starts; in-flight sends finish and
        the rest are reported as CANCELLED.
        """
        by_user: dict[str, list[CandidateAlert]] = {}
        for alert in alerts:
            by_user.setdefault(alert.user_id, []).append(alert)

        results: list[DispatchResult] = []
        semaphore = asyncio.Semaphore(self._max_concurrency)

        def emit(result: DispatchResult) -> None:
            results.append(result)
            if on_result is not None:
                on_result(result)

        async def user_worker(user_alerts: list[CandidateAlert]) -> None:
            async with semaphore:
                for alert in user_alerts:
                    if cancel_event is not None and cancel_event.is_set():
                        emit(DispatchResult(alert=alert, outcome=DispatchOutcome.CANCELLED))
                        continue
                    emit(await self.dispatch(alert))

        outcomes = await asyncio.gather(
            *(user_worker(items) for items in by_user.values()),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return results
