from stockdrop_monitor.providers.push.onesignal.onesignal_provider import \
    OneSignalPushProvider

__all__ = ["OneSignalPushProvider"]
