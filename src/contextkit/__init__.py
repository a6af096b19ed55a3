"""
contextkit: pluggable context aggregation for LLM prompt construction.

Subpackages
-----------
- fetch:     fetcher contract, registry and registry bootstrap
- context:   per-invocation Context aggregator
- pipeline:  job-layer helpers built on Context
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version(__name__)
except PackageNotFoundError:  # local editable install
    __version__ = "0.0.0-dev"

from .context import Context, FetchOutcome, FetchStatus
from .errors import ConfigurationError, ContextKitError, FetchError, ValidationError
from .fetch import BaseFetcher, FallbackCapable, Fetcher, FetcherInfo, FetcherRegistry
from .pipeline import FetchRequest, build_context, enrich

__all__ = [
    "BaseFetcher",
    "ConfigurationError",
    "Context",
    "ContextKitError",
    "FallbackCapable",
    "FetchError",
    "FetchOutcome",
    "FetchRequest",
    "FetchStatus",
    "Fetcher",
    "FetcherInfo",
    "FetcherRegistry",
    "ValidationError",
    "build_context",
    "enrich",
]
