"""Push notification providers."""
from stockdrop_monitor.providers.push.onesignal import OneSignalPushProvider
from stockdrop_monitor.providers.push.push_provider_abc import PushProviderABC

__all__ = ["OneSignalPushProvider", "PushProviderABC"]
