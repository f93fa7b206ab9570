"""Base class for external HTTP providers."""
from abc import ABC


class ProviderABC(ABC):
    """Lifecycle shared by every external provider (quotes, push).

    Providers own their HTTP client; the container closes them on shutdown.
    """

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "ProviderABC":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
