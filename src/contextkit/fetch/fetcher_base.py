"""
Fetcher contract and abstract base class for context data fetchers.

A fetcher is any object exposing a callable ``fetch(params)`` that returns a
mapping. Fetchers may additionally provide ``fallback_data(params)``, used
when ``fetch`` raises, plus ``description()`` and ``allowed_params()`` for
introspection.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from ..errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Generic data fetcher"


@runtime_checkable
class Fetcher(Protocol):
    """
    Required capability of every registered fetcher.
    """

    def fetch(self, params: Mapping[str, Any]) -> Mapping[str, Any]: ...


@runtime_checkable
class FallbackCapable(Protocol):
    """
    Optional capability: substitute data when ``fetch`` fails.
    """

    def fallback_data(self, params: Mapping[str, Any]) -> Mapping[str, Any]: ...


class FetcherInfo(BaseModel):
    """
    Introspection record for a registered fetcher.
    """

    name: str = Field(..., description="Fetcher class or object name")
    description: str = Field(default=DEFAULT_DESCRIPTION)
    allowed_params: List[str] = Field(
        default_factory=list, description="Advisory list of accepted parameters"
    )
    has_fallback: bool = Field(default=False)


def is_valid_key(key: Any) -> bool:
    return isinstance(key, str) and bool(key.strip())


def supports_fetch(fetcher: Any) -> bool:
    return callable(getattr(fetcher, "fetch", None))


def supports_fallback(fetcher: Any) -> bool:
    return callable(getattr(fetcher, "fallback_data", None))


def fetcher_name(fetcher: Any) -> str:
    if inspect.isclass(fetcher) or inspect.isfunction(fetcher) or inspect.ismodule(fetcher):
        return fetcher.__name__
    return type(fetcher).__name__


def _first_doc_line(obj: Any) -> str:
    doc = inspect.getdoc(obj) or ""
    for line in doc.splitlines():
        if line.strip():
            return line.strip()
    return ""


def describe_fetcher(fetcher: Any) -> FetcherInfo:
    """
    Build a FetcherInfo for any object satisfying the fetcher contract.
    """
    describe = getattr(fetcher, "description", None)
    if callable(describe):
        description = str(describe())
    else:
        description = _first_doc_line(fetcher) or DEFAULT_DESCRIPTION

    allowed = getattr(fetcher, "allowed_params", None)
    allowed_params: Iterable[str] = allowed() if callable(allowed) else ()

    return FetcherInfo(
        name=fetcher_name(fetcher),
        description=description,
        allowed_params=sorted(str(p) for p in allowed_params),
        has_fallback=supports_fallback(fetcher),
    )


class BaseFetcher(ABC):
    """
    Abstract base class for context fetchers implementing a pluggable architecture.

    Subclasses implement ``fetch`` and may define ``fallback_data`` to opt in
    to the fallback capability. ``allowed_params`` and ``required_params``
    declare the parameters the fetcher understands; they are only enforced
    by the ``validate_*`` helpers and ``safe_fetch``.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"{self.__class__.__module__}.{self.__class__.__name__}"
        )

    @abstractmethod
    def fetch(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Fetch data for the given parameters.
        """
        pass

    def allowed_params(self) -> FrozenSet[str]:
        """
        Parameter names this fetcher accepts. Empty means anything goes.
        """
        return frozenset()

    def required_params(self) -> FrozenSet[str]:
        """
        Parameter names that must be present.
        """
        return frozenset()

    def description(self) -> str:
        return _first_doc_line(type(self)) or DEFAULT_DESCRIPTION

    def validate_params(self, params: Mapping[str, Any]) -> None:
        """
        Reject parameters outside ``allowed_params``.
        """
        allowed = self.allowed_params()
        if not allowed:
            return

        invalid = sorted(set(params) - set(allowed))
        if invalid:
            raise ValidationError(
                f"Invalid parameters: {', '.join(invalid)}. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )

    def validate_required_params(self, params: Mapping[str, Any]) -> None:
        missing = sorted(set(self.required_params()) - set(params))
        if missing:
            raise ValidationError(f"Missing required parameters: {', '.join(missing)}")

    def validate_all_params(self, params: Mapping[str, Any]) -> None:
        self.validate_params(params)
        self.validate_required_params(params)

    def safe_fetch(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate and fetch, returning fallback data (or an empty dict) on error.
        """
        try:
            self.validate_params(params)
            return dict(self.fetch(params))
        except Exception as e:
            self.logger.error(f"{self} fetch failed: {e}")
            if isinstance(self, FallbackCapable):
                return dict(self.fallback_data(params))
            return {}

    def metadata(self) -> FetcherInfo:
        return describe_fetcher(self)

    def __str__(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
