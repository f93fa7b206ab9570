"""Abstract base class for batch quote providers."""
from abc import abstractmethod

from stockdrop_monitor.providers.core import ProviderABC
from stockdrop_monitor.schemas import Quote


class QuoteProviderABC(ProviderABC):
    """Bulk quote lookup: one call returns quotes for a small batch of symbols.

    Callers are responsible for chunking to `max_batch_size`.
    """

    max_batch_size: int = 10

    @abstractmethod
    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        """Fetch current quotes for up to `max_batch_size` symbols in one request.

        Symbols the provider has no data for are omitted, not reported as errors.

        Raises:
            QuoteProviderError: non-success status or malformed body.
            httpx.HTTPError: transport failure or timeout.
        """
