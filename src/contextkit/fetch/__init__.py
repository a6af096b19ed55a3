"""
Fetcher contract, registry and registry bootstrap.
"""

from .fetcher_base import (
    BaseFetcher,
    FallbackCapable,
    Fetcher,
    FetcherInfo,
    describe_fetcher,
)
from .loader import (
    bootstrap_registry,
    import_object,
    load_fetcher,
    load_registry_file,
    register_from_mapping,
)
from .registry import FetcherRegistry, RegisteredFetcher

__all__ = [
    "BaseFetcher",
    "FallbackCapable",
    "Fetcher",
    "FetcherInfo",
    "describe_fetcher",
    "FetcherRegistry",
    "RegisteredFetcher",
    "bootstrap_registry",
    "import_object",
    "load_fetcher",
    "load_registry_file",
    "register_from_mapping",
]
