"""Exception types shared by providers and the monitoring pipeline."""


class ConfigurationError(RuntimeError):
    """Required configuration (e.g. provider credentials) is missing or invalid.

    Fatal for a whole cycle; raised before any external call is made.
    """


class ProviderError(Exception):
    """An external provider returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuoteProviderError(ProviderError):
    """A quote request failed (non-200 status or malformed body)."""


class PushProviderError(ProviderError):
    """The push provider rejected a notification."""
