"""Quote batch fetcher: chunked, bounded-concurrency quote lookups.

Each chunk is one provider request with its own timeout. A failed chunk only
drops its own symbols; the remaining chunks are unaffected.
"""
import asyncio
import logging
from dataclasses import dataclass, field

from stockdrop_monitor.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from stockdrop_monitor.providers.quotes import QuoteProviderABC
from stockdrop_monitor.schemas import Quote
from stockdrop_monitor.utils import chunked, normalize_symbol

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    quotes: dict[str, Quote] = field(default_factory=dict)
    chunks: int = 0
    failed_chunks: int = 0
    failed_symbols: list[str] = field(default_factory=list)


class QuoteBatchFetcher:
    """Fetches quotes for an arbitrary number of symbols.

    Args:
        provider: Batch quote provider (one request per chunk).
        batch_size: Symbols per request; capped at the provider's maximum.
        max_concurrency: Chunk requests in flight at once.
        timeout: Seconds before a chunk request counts as failed.
    """

    def __init__(
        self,
        provider: QuoteProviderABC,
        *,
        batch_size: int = 10,
        max_concurrency: int = 3,
        timeout: float = 12.0,
    ) -> None:
        self._provider = provider
        self._batch_size = max(1, min(batch_size, provider.max_batch_size))
        self._semaphore_size = max(1, max_concurrency)
        self._timeout = timeout
        self._error_mapper = ProviderErrorMapper(api_name="Quote provider")

    async def fetch(self, symbols: list[str]) -> FetchResult:
        unique = list(dict.fromkeys(normalize_symbol(s) for s in symbols if s.strip()))
        result = FetchResult()
        if not unique:
            return result

        chunks = list(chunked(unique, self._batch_size))
        result.chunks = len(chunks)
        semaphore = asyncio.Semaphore(self._semaphore_size)

        async def run_chunk(chunk: list[str]) -> list[Quote] | None:
            async with semaphore:
                try:
                    return await asyncio.wait_for(
                        self._provider.get_quotes(chunk), timeout=self._timeout
                    )
                except PROVIDER_EXCEPTIONS as exc:
                    logger.warning(
                        "%s; skipping %d symbols",
                        self._error_mapper.describe(exc, target=",".join(chunk)),
                        len(chunk),
                    )
                    return None

        logger.info("Fetching quotes for %d symbols in %d chunks", len(unique), len(chunks))
        outcomes = await asyncio.gather(*(run_chunk(c) for c in chunks))

        wanted = set(unique)
        for chunk, quotes in zip(chunks, outcomes):
            if quotes is None:
                result.failed_chunks += 1
                result.failed_symbols.extend(chunk)
                continue
            for quote in quotes:
                if quote.symbol in wanted:
                    result.quotes[quote.symbol] = quote

        logger.info(
            "Retrieved prices for %d/%d symbols (%d failed chunks)",
            len(result.quotes),
            len(unique),
            result.failed_chunks,
        )
        return result
