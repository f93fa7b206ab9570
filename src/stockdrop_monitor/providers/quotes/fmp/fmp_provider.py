"""Financial Modeling Prep quote provider for stocks."""
import logging

import httpx

from stockdrop_monitor.providers.core import QuoteProviderError, as_float, round2
from stockdrop_monitor.providers.quotes.fmp.models import FmpQuoteParams
from stockdrop_monitor.providers.quotes.quote_provider_abc import QuoteProviderABC
from stockdrop_monitor.schemas import Quote
from stockdrop_monitor.utils import normalize_symbol, parse_timestamp

logger = logging.getLogger(__name__)


class FmpQuoteProvider(QuoteProviderABC):
    """Batch stock quotes via the FMP `/quote/{A,B,C}` endpoint.

    A 200 response carries a JSON array with one item per known symbol;
    unknown symbols are simply missing from the array.
    """

    BASE_URL = "https://financialmodelingprep.com/api/v3"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str | None = None,
        timeout: float = 12.0,
        max_batch_size: int = 10,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the FMP provider.

        Args:
            api_key: FMP API key (required to make requests).
            base_url: Override of the API root (tests, proxies).
            timeout: Per-request timeout in seconds.
            max_batch_size: Documented maximum symbols per request.
            client: Preconfigured client (e.g. with a mock transport).
        """
        self._api_key = api_key
        self.max_batch_size = max_batch_size
        self._client = client or httpx.AsyncClient(
            base_url=base_url or self.BASE_URL,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        """Fetch quotes for one batch of symbols (single request)."""
        if not symbols:
            return []
        if not self._api_key:
            raise QuoteProviderError("FMP API key is not configured")
        params = FmpQuoteParams(apikey=self._api_key).model_dump()
        response = await self._client.get(f"/quote/{','.join(symbols)}", params=params)
        if response.status_code != 200:
            raise QuoteProviderError(
                f"FMP quote request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise QuoteProviderError("FMP returned a non-JSON body") from exc
        if not isinstance(data, list):
            raise QuoteProviderError("Unexpected FMP response format (expected a JSON array)")

        quotes = [q for q in (self._quote_from_item(item) for item in data) if q is not None]
        logger.debug("FMP returned %d/%d quotes", len(quotes), len(symbols))
        return quotes

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    @staticmethod
    def _quote_from_item(item: object) -> Quote | None:
        """Build a Quote from one array item; None if symbol or price is unusable."""
        if not isinstance(item, dict):
            return None
        symbol = item.get("symbol")
        price = as_float(item.get("price"))
        if not symbol or not isinstance(symbol, str) or price is None:
            return None
        ts = as_float(item.get("timestamp"))
        return Quote(
            symbol=normalize_symbol(symbol),
            price=price,
            change=as_float(item.get("change"), 0.0) or 0.0,
            change_percent=as_float(item.get("changesPercentage"), 0.0) or 0.0,
            volume=round2(as_float(item.get("volume"))),
            timestamp=parse_timestamp(ts),
        )
