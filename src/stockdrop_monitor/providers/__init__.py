"""External providers used by the monitoring pipeline.

- FmpQuoteProvider: batch stock quotes via Financial Modeling Prep
- OneSignalPushProvider: user-targeted push notifications via OneSignal

Example:
    async with FmpQuoteProvider(api_key) as provider:
        quotes = await provider.get_quotes(["AAPL", "MSFT"])
"""
from stockdrop_monitor.providers.core import ProviderABC
from stockdrop_monitor.providers.push import OneSignalPushProvider, PushProviderABC
from stockdrop_monitor.providers.quotes import FmpQuoteProvider, QuoteProviderABC

__all__ = [
    "FmpQuoteProvider",
    "OneSignalPushProvider",
    "ProviderABC",
    "PushProviderABC",
    "QuoteProviderABC",
]
