"""Service layer: the stages of the monitoring cycle and its orchestrator."""
from stockdrop_monitor.services.alert_matcher import is_breach, match_alerts
from stockdrop_monitor.services.dispatcher import (NotificationDispatcher,
                                                   format_alert_message)
from stockdrop_monitor.services.orchestrator import CycleOrchestrator
from stockdrop_monitor.services.quota_tracker import QuotaTracker
from stockdrop_monitor.services.quote_fetcher import FetchResult, QuoteBatchFetcher
from stockdrop_monitor.services.recorder import NotificationRecorder
from stockdrop_monitor.services.subscription_index import (
    SubscriptionIndex, SubscriptionIndexLoader, build_subscription_index,
    resolve_threshold)

__all__ = [
    "CycleOrchestrator",
    "FetchResult",
    "NotificationDispatcher",
    "NotificationRecorder",
    "QuotaTracker",
    "QuoteBatchFetcher",
    "SubscriptionIndex",
    "SubscriptionIndexLoader",
    "build_subscription_index",
    "format_alert_message",
    "is_breach",
    "match_alerts",
    "resolve_threshold",
]
