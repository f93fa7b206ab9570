"""Core provider abstractions."""
from stockdrop_monitor.providers.core.error_mapper import (
    PROVIDER_EXCEPTIONS,
    ProviderErrorMapper,
)
from stockdrop_monitor.providers.core.exceptions import (
    ConfigurationError,
    ProviderError,
    PushProviderError,
    QuoteProviderError,
)
from stockdrop_monitor.providers.core.provider_abc import ProviderABC
from stockdrop_monitor.providers.core.utils import as_float, round2

__all__ = [
    "PROVIDER_EXCEPTIONS",
    "ConfigurationError",
    "ProviderABC",
    "ProviderError",
    "ProviderErrorMapper",
    "PushProviderError",
    "QuoteProviderError",
    "as_float",
    "round2",
]
