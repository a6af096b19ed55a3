"""
Thread-safe registry mapping fetch keys to fetcher implementations.

The registry is an ordinary object: application startup builds one, registers
its fetchers, and hands it to whatever constructs Contexts. Tests build a
fresh registry (or call ``clear``) for isolation.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterator, Optional

from ..errors import ValidationError
from .fetcher_base import (
    FetcherInfo,
    describe_fetcher,
    fetcher_name,
    is_valid_key,
    supports_fallback,
    supports_fetch,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredFetcher:
    """
    A registry entry. Capabilities are resolved once, at registration.
    """

    key: str
    fetcher: Any
    has_fallback: bool = False

    @property
    def name(self) -> str:
        return fetcher_name(self.fetcher)


class FetcherRegistry:
    """
    Registry for fetcher implementations keyed by fetch key.

    At most one fetcher is bound to a key; registering an existing key
    replaces the previous fetcher.
    """

    def __init__(self) -> None:
        self._fetchers: Dict[str, RegisteredFetcher] = {}
        self._lock = threading.RLock()

    def register(self, key: str, fetcher: Any) -> Any:
        """
        Register a fetcher under a key.

        Args:
            key: Non-empty string naming the fetcher
            fetcher: Object exposing a callable ``fetch(params)``

        Returns:
            The registered fetcher

        Raises:
            ValidationError: If the key or fetcher is invalid
        """
        if not is_valid_key(key):
            raise ValidationError("Key must be a non-empty string")
        if not supports_fetch(fetcher):
            raise ValidationError("Fetcher must provide a callable 'fetch'")

        entry = RegisteredFetcher(
            key=key, fetcher=fetcher, has_fallback=supports_fallback(fetcher)
        )

        with self._lock:
            previous = self._fetchers.get(key)
            self._fetchers[key] = entry

        if previous is not None:
            logger.debug(f"Replaced fetcher '{key}' ({previous.name})")
        logger.info(f"Registered fetcher '{key}' => {entry.name}")
        return fetcher

    def fetcher(self, key: str) -> Callable[[Any], Any]:
        """
        Decorator form of ``register``.

        Classes are instantiated without arguments before registration;
        the decorated object itself is returned unchanged.
        """

        def decorator(obj: Any) -> Any:
            self.register(key, obj() if isinstance(obj, type) else obj)
            return obj

        return decorator

    def get(self, key: str) -> Optional[Any]:
        """Return the fetcher registered under key, or None."""
        entry = self.get_entry(key)
        return entry.fetcher if entry is not None else None

    def get_entry(self, key: str) -> Optional[RegisteredFetcher]:
        if not is_valid_key(key):
            return None
        with self._lock:
            return self._fetchers.get(key)

    def is_registered(self, key: str) -> bool:
        return self.get_entry(key) is not None

    def unregister(self, key: str) -> Optional[Any]:
        """
        Remove a fetcher from the registry.

        Returns:
            The removed fetcher, or None if nothing was registered
        """
        if not is_valid_key(key):
            return None

        with self._lock:
            removed = self._fetchers.pop(key, None)

        if removed is None:
            return None
        logger.info(f"Unregistered fetcher '{key}'")
        return removed.fetcher

    def keys(self) -> FrozenSet[str]:
        """Snapshot of the registered keys."""
        with self._lock:
            return frozenset(self._fetchers)

    def clear(self) -> None:
        """Remove every registered fetcher."""
        with self._lock:
            count = len(self._fetchers)
            self._fetchers = {}
        logger.debug(f"Cleared {count} fetchers from registry")

    def get_info(self) -> Dict[str, FetcherInfo]:
        """
        Get information about all registered fetchers, sorted by key.
        """
        with self._lock:
            entries = sorted(self._fetchers.values(), key=lambda e: e.key)
        return {entry.key: describe_fetcher(entry.fetcher) for entry in entries}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_registered(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._fetchers)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.keys()))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(keys={sorted(self.keys())})"
