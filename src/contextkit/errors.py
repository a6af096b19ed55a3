"""
Exception types raised (or recorded) by the context aggregation engine.
"""

from typing import Optional


class ContextKitError(Exception):
    """
    Base class for all contextkit errors.
    """

    pass


class ConfigurationError(ContextKitError, LookupError):
    """
    Raised when a fetch key has no registered fetcher, or when the registry
    cannot be bootstrapped from its configuration.
    """

    pass


class ValidationError(ContextKitError, ValueError):
    """
    Raised when a key, fetcher or set of parameters is malformed.
    """

    pass


class FetchError(ContextKitError):
    """
    A fetcher's primary ``fetch`` call failed.

    Context records these per key and never raises them to its caller.
    """

    def __init__(self, key: str, original: Optional[BaseException] = None):
        self.key = key
        self.original = original
        detail = str(original) if original is not None else "unknown error"
        super().__init__(f"Failed to fetch data for '{key}': {detail}")

    @property
    def message(self) -> str:
        return str(self)
