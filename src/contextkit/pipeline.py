"""
Job-layer helpers for building an enriched prompt context.

Callers describe the fetchers they want as a list of fetch requests (for
example decoded from a job payload) and get back a populated Context.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .context import Context
from .errors import ValidationError
from .fetch.registry import FetcherRegistry
from .settings import settings

logger = logging.getLogger(__name__)


class FetchRequest(BaseModel):
    """
    A single fetch to perform: the fetcher key plus its parameters.
    """

    key: str = Field(..., description="Registered fetcher key")
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("key")
    @classmethod
    def check_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Fetch key cannot be empty")
        return v

    @classmethod
    def parse(cls, entry: Any) -> "FetchRequest":
        """
        Accept a FetchRequest, a bare key, a (key, params) pair or a dict.
        """
        if isinstance(entry, cls):
            return entry
        try:
            if isinstance(entry, str):
                return cls(key=entry)
            if isinstance(entry, (tuple, list)) and len(entry) == 2:
                key, params = entry
                return cls(key=key, params=params or {})
            if isinstance(entry, Mapping):
                return cls.model_validate(dict(entry))
        except ValueError as e:
            raise ValidationError(f"Invalid fetch request {entry!r}: {e}") from e
        raise ValidationError(f"Unsupported fetch request: {entry!r}")


def build_context(
    registry: FetcherRegistry,
    base_data: Optional[Mapping[str, Any]],
    requests: Iterable[Any],
    *,
    skip_unregistered: Optional[bool] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> Context:
    """
    Create a Context and run the requested fetches against it.

    Args:
        registry: Registry to resolve fetch keys
        base_data: Base data for the context
        requests: Fetch requests in any form accepted by ``FetchRequest.parse``
        skip_unregistered: Log and skip unknown keys instead of raising.
            Defaults to ``settings.skip_unregistered``.
        parallel: Run fetcher calls on a thread pool
        max_workers: Worker cap for parallel fetching

    Returns:
        The populated Context

    Raises:
        ConfigurationError: If a key is unregistered and skipping is off
    """
    if skip_unregistered is None:
        skip_unregistered = settings.skip_unregistered

    context = Context(base_data, registry=registry, max_workers=max_workers)

    planned = []
    for entry in requests:
        request = FetchRequest.parse(entry)
        if skip_unregistered and not registry.is_registered(request.key):
            logger.warning(f"Skipping unregistered fetcher '{request.key}'")
            continue
        planned.append(request)

    if planned:
        context.fetch_multiple(*planned, parallel=parallel)

    summary = context.summary()
    logger.info(
        f"Context enrichment: base_keys={summary['base_keys']} "
        f"enriched_keys={summary['fetched_keys']} errors={summary['error_keys']}"
    )
    return context


def enrich(
    registry: FetcherRegistry,
    base_data: Optional[Mapping[str, Any]],
    requests: Iterable[Any],
    **kwargs: Any,
) -> Dict[str, Any]:
    """
    Convenience wrapper returning the merged prompt data directly.
    """
    return build_context(registry, base_data, requests, **kwargs).to_mapping()
