"""
Registry bootstrap from declarative configuration.

A fetchers file is YAML with a top-level ``fetchers`` mapping::

    fetchers:
      recent_orders: myapp.fetchers:RecentOrdersFetcher
      github_info:
        target: myapp.fetchers.github:GithubInfoFetcher
        enabled: false

Targets are imported with importlib; classes are instantiated without
arguments before being registered.
"""

import importlib
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import yaml

from ..errors import ConfigurationError
from ..settings import Settings, settings as default_settings
from .registry import FetcherRegistry

logger = logging.getLogger(__name__)


def import_object(path: str) -> Any:
    """
    Import ``package.module:attr`` (or ``package.module.attr``).
    """
    if not isinstance(path, str) or not path.strip():
        raise ConfigurationError(f"Invalid import path: {path!r}")

    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")

    if not module_name or not attr_path:
        raise ConfigurationError(f"Invalid import path: {path!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module for '{path}': {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise ConfigurationError(f"Cannot resolve '{path}': {e}") from e
    return obj


def load_fetcher(target: str) -> Any:
    """Import a fetcher target, instantiating it if it is a class."""
    obj = import_object(target)
    if isinstance(obj, type):
        try:
            return obj()
        except Exception as e:
            raise ConfigurationError(f"Cannot instantiate fetcher '{target}': {e}") from e
    return obj


def register_from_mapping(
    registry: FetcherRegistry, fetchers: Mapping[str, Any]
) -> List[str]:
    """
    Register each entry of a ``{key: target}`` mapping.

    Entries may also be ``{key: {"target": ..., "enabled": bool}}``;
    disabled entries are skipped.

    Returns:
        Keys that were registered, in declaration order
    """
    registered = []
    for key, entry in fetchers.items():
        if isinstance(entry, Mapping):
            if not entry.get("enabled", True):
                logger.info(f"Skipping disabled fetcher '{key}'")
                continue
            target = entry.get("target")
        else:
            target = entry

        if not target:
            raise ConfigurationError(f"Fetcher '{key}' has no import target")

        registry.register(key, load_fetcher(target))
        registered.append(key)

    logger.debug(f"Registered {len(registered)} fetchers from configuration")
    return registered


def load_registry_file(
    path: Union[str, Path], registry: Optional[FetcherRegistry] = None
) -> FetcherRegistry:
    """
    Populate a registry from a YAML fetchers file.

    Args:
        path: YAML file with a top-level ``fetchers`` mapping
        registry: Registry to populate; a new one is created if omitted

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Fetchers file not found: {path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Fetchers file must contain a mapping: {path}")

    fetchers = data.get("fetchers") or {}
    if not isinstance(fetchers, Mapping):
        raise ConfigurationError(f"'fetchers' must be a mapping in {path}")

    registry = registry if registry is not None else FetcherRegistry()
    register_from_mapping(registry, fetchers)
    logger.info(f"Loaded {len(fetchers)} fetcher entries from {path}")
    return registry


def bootstrap_registry(
    settings: Optional[Settings] = None,
    fetchers_file: Optional[Union[str, Path]] = None,
) -> FetcherRegistry:
    """
    Build the application registry.

    An explicit ``fetchers_file`` takes precedence over ``settings.fetchers_file``.
    """
    settings = settings or default_settings
    fetchers_file = fetchers_file or settings.fetchers_file
    if fetchers_file is None:
        logger.debug("No fetchers file configured; starting with an empty registry")
        return FetcherRegistry()
    return load_registry_file(fetchers_file)
