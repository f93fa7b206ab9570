from stockdrop_monitor.providers.quotes.fmp.fmp_provider import FmpQuoteProvider

__all__ = ["FmpQuoteProvider"]
