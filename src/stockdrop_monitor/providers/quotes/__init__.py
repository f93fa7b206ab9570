"""Stock quote providers."""
from stockdrop_monitor.providers.quotes.fmp import FmpQuoteProvider
from stockdrop_monitor.providers.quotes.quote_provider_abc import QuoteProviderABC

__all__ = ["FmpQuoteProvider", "QuoteProviderABC"]
