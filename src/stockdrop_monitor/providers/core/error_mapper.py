"""Maps provider exceptions to short, operator-facing failure reasons."""
import asyncio
from dataclasses import dataclass

import httpx

from stockdrop_monitor.providers.core.exceptions import ProviderError


@dataclass(frozen=True)
class ProviderErrorMapper:
    """Describes provider/backend exceptions for logs and cycle summaries.

    One instance per upstream (quotes, push) so messages carry the API name.
    """

    api_name: str = "API"

    def describe(self, exc: BaseException, target: str | None = None) -> str:
        """Return a one-line reason for a failed call.

        Args:
            exc: The exception raised by the provider call.
            target: Optional identifier of the unit of work (a chunk, a user).
        """
        suffix = f" for {target}" if target else ""
        if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
            return f"Request to {self.api_name} timed out{suffix}"
        if isinstance(exc, httpx.HTTPStatusError):
            return f"{self.api_name} returned HTTP {exc.response.status_code}{suffix}"
        if isinstance(exc, ProviderError):
            status = f" (HTTP {exc.status_code})" if exc.status_code else ""
            return f"{self.api_name} error{status}{suffix}: {exc}"
        if isinstance(exc, httpx.TransportError):
            return f"{self.api_name} unreachable{suffix}: {exc.__class__.__name__}"
        if isinstance(exc, (ValueError, KeyError, TypeError)):
            return f"Malformed {self.api_name} response{suffix}: {exc}"
        return f"Unexpected {self.api_name} failure{suffix}: {exc!r}"


# Exceptions from provider calls that are recovered locally; everything else
# propagates to the orchestrator boundary.
PROVIDER_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ProviderError,
    ValueError,
    KeyError,
    TypeError,
    TimeoutError,
    asyncio.TimeoutError,
    httpx.HTTPError,
)
