"""
Per-invocation context aggregation.

A Context holds immutable base data (current user, workspace, ...) and pulls
enrichment data from registered fetchers. Each fetch key owns exactly one
outcome slot; a failing fetcher is recorded against its key and never aborts
the rest of the aggregation.

Example::

    context = Context({"user": user}, registry=registry)
    context.fetch("recent_orders", limit=5)
    context.fetch_multiple("profile", ("documents", {"query": "billing"}))
    prompt_data = context.to_mapping()
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .errors import ConfigurationError, FetchError, ValidationError
from .fetch.fetcher_base import is_valid_key
from .fetch.registry import FetcherRegistry, RegisteredFetcher
from .settings import settings

logger = logging.getLogger(__name__)


class FetchStatus(Enum):
    """
    State of a single fetch key within a Context.
    """

    UNFETCHED = "unfetched"
    SUCCESS = "success"
    FAILED = "failed"
    FAILED_WITH_FALLBACK = "failed_with_fallback"


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of the latest fetch for a key. Replaced wholesale on re-fetch.
    """

    key: str
    status: FetchStatus
    data: Optional[Dict[str, Any]] = None
    error: Optional[FetchError] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


class Context:
    """
    Aggregates base data with data from selectively invoked fetchers.

    Not safe for concurrent use; create one Context per unit of work.
    """

    def __init__(
        self,
        base_data: Optional[Mapping[str, Any]] = None,
        *,
        registry: FetcherRegistry,
        max_workers: Optional[int] = None,
        **extra_base: Any,
    ):
        merged = dict(base_data or {})
        merged.update(extra_base)
        self._base_data: Mapping[str, Any] = MappingProxyType(merged)
        self.registry = registry
        self.max_workers = max_workers
        self._outcomes: Dict[str, FetchOutcome] = {}

    @property
    def base_data(self) -> Mapping[str, Any]:
        return self._base_data

    @property
    def fetched_data(self) -> Mapping[str, Dict[str, Any]]:
        """Read-only view of data stored per key (fallback data included)."""
        return MappingProxyType(
            {k: o.data for k, o in self._outcomes.items() if o.data is not None}
        )

    @property
    def errors(self) -> Mapping[str, str]:
        """Read-only view of error messages per key."""
        return MappingProxyType(
            {k: o.error_message for k, o in self._outcomes.items() if o.error is not None}
        )

    # Fetching

    def fetch(
        self, key: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> Dict[str, Any]:
        """
        Fetch data for key using its registered fetcher.

        Base data is merged with params (params win) and passed to the
        fetcher. Failures are recorded against the key; the fallback data
        is returned when the fetcher provides it, otherwise an empty dict.

        Raises:
            ConfigurationError: If no fetcher is registered for key
        """
        entry = self._resolve(key)
        fetch_params = self._fetch_params(params, kwargs)
        return self._settle(entry, self._invoke(entry, fetch_params), fetch_params)

    def fetch_multiple(self, *entries: Any, parallel: bool = False) -> Dict[str, Dict[str, Any]]:
        """
        Fetch several keys in order.

        Each entry is a bare key, a ``(key,)`` or ``(key, params)`` sequence,
        or an object with ``key`` and ``params`` attributes. A key fetched
        more than once keeps only the result of its last entry. Entries are
        fetched one at a time, so an unregistered key raises only after the
        entries before it have been recorded.

        With ``parallel=True`` every key is resolved before any fetcher is
        called, then the fetcher calls run on a thread pool. Outcomes and
        fallbacks are applied on the calling thread in submission order, so
        the override semantics match the sequential path.

        Returns:
            Snapshot of all fetched data after every entry is processed
        """
        if parallel and len(entries) > 1:
            self._fetch_parallel(entries)
        else:
            for item in entries:
                key, params = _normalize_entry(item)
                self.fetch(key, params)

        return dict(self.fetched_data)

    def _fetch_parallel(self, entries: Tuple[Any, ...]) -> None:
        planned: List[Tuple[RegisteredFetcher, Dict[str, Any]]] = []
        for item in entries:
            key, params = _normalize_entry(item)
            planned.append((self._resolve(key), self._fetch_params(params, {})))

        workers = min(self.max_workers or settings.max_workers, len(planned))
        logger.debug(f"Dispatching {len(planned)} fetches on {workers} workers")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._invoke, entry, fetch_params)
                for entry, fetch_params in planned
            ]
            for (entry, fetch_params), future in zip(planned, futures):
                self._settle(entry, future.result(), fetch_params)

    def _resolve(self, key: str) -> RegisteredFetcher:
        entry = self.registry.get_entry(key)
        if entry is None:
            raise ConfigurationError(f"No fetcher registered for key: {key}")
        return entry

    def _fetch_params(
        self, params: Optional[Mapping[str, Any]], kwargs: Mapping[str, Any]
    ) -> Dict[str, Any]:
        fetch_params = dict(self._base_data)
        fetch_params.update(params or {})
        fetch_params.update(kwargs)
        return fetch_params

    def _invoke(self, entry: RegisteredFetcher, fetch_params: Dict[str, Any]) -> FetchOutcome:
        # Runs on worker threads in parallel mode: must not touch Context state.
        try:
            data = dict(entry.fetcher.fetch(dict(fetch_params)))
        except Exception as e:
            error = FetchError(entry.key, e)
            logger.error(str(error))
            return FetchOutcome(entry.key, FetchStatus.FAILED, error=error)

        logger.info(f"Successfully fetched data for '{entry.key}'")
        return FetchOutcome(entry.key, FetchStatus.SUCCESS, data=data)

    def _settle(
        self, entry: RegisteredFetcher, outcome: FetchOutcome, fetch_params: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._outcomes[entry.key] = outcome
        if outcome.status is FetchStatus.FAILED and entry.has_fallback:
            # The failure stays recorded if fallback_data raises.
            fallback = dict(entry.fetcher.fallback_data(dict(fetch_params)))
            logger.info(f"Using fallback data for '{entry.key}'")
            outcome = FetchOutcome(
                entry.key, FetchStatus.FAILED_WITH_FALLBACK, data=fallback, error=outcome.error
            )
            self._outcomes[entry.key] = outcome
        return outcome.data if outcome.data is not None else {}

    # Inspection

    def to_mapping(self) -> Dict[str, Any]:
        """
        Base data overlaid with fetched data (fetched values win).
        """
        mapping = dict(self._base_data)
        mapping.update(self.fetched_data)
        return mapping

    to_dict = to_mapping

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        outcome = self._outcomes.get(key)
        return outcome.data if outcome is not None else None

    def __getitem__(self, key: str) -> Optional[Dict[str, Any]]:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def status(self, key: str) -> FetchStatus:
        outcome = self._outcomes.get(key)
        return outcome.status if outcome is not None else FetchStatus.UNFETCHED

    def is_success(self, key: str) -> bool:
        """True if data was fetched for key and no error was recorded."""
        return self.status(key) is FetchStatus.SUCCESS

    def is_error(self, key: str) -> bool:
        outcome = self._outcomes.get(key)
        return outcome is not None and outcome.error is not None

    def error_message(self, key: str) -> Optional[str]:
        outcome = self._outcomes.get(key)
        return outcome.error_message if outcome is not None else None

    def exception(self, key: str) -> Optional[FetchError]:
        outcome = self._outcomes.get(key)
        return outcome.error if outcome is not None else None

    def has_errors(self) -> bool:
        return any(o.error is not None for o in self._outcomes.values())

    def successful_keys(self) -> FrozenSet[str]:
        return frozenset(self.fetched_data) - self.error_keys()

    def error_keys(self) -> FrozenSet[str]:
        return frozenset(self.errors)

    def reset(self) -> None:
        """Forget all fetched data and errors. Base data is kept."""
        self._outcomes = {}

    def summary(self) -> Dict[str, List[str]]:
        return {
            "base_keys": sorted(self._base_data),
            "fetched_keys": sorted(self.fetched_data),
            "successful_keys": sorted(self.successful_keys()),
            "error_keys": sorted(self.error_keys()),
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(base_keys={sorted(self._base_data)}, "
            f"fetched={sorted(self.fetched_data)}, errors={sorted(self.errors)})"
        )


def _normalize_entry(item: Any) -> Tuple[str, Optional[Mapping[str, Any]]]:
    if isinstance(item, str):
        return item, None
    if isinstance(item, (tuple, list)):
        if len(item) == 1:
            key, params = item[0], None
        elif len(item) == 2:
            key, params = item
        else:
            raise ValidationError(f"Fetch entry must be a (key, params) pair: {item!r}")
    elif hasattr(item, "key") and hasattr(item, "params"):
        key, params = item.key, item.params
    else:
        raise ValidationError(f"Unsupported fetch entry: {item!r}")

    if params is not None and not isinstance(params, Mapping):
        raise ValidationError(f"Parameters for '{key}' must be a mapping")
    if not is_valid_key(key):
        raise ConfigurationError(f"No fetcher registered for key: {key}")
    return key, params
