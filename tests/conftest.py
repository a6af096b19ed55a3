"""
Fixtures and test configuration for the contextkit test suite.
"""

import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest
import yaml

from contextkit.fetch.fetcher_base import BaseFetcher
from contextkit.fetch.registry import FetcherRegistry
from contextkit.settings import Settings


class EchoFetcher:
    """Echoes the parameters it receives."""

    def fetch(self, params):
        return dict(params)


class UserFetcher:
    """Returns the current user's id and a passed-through parameter."""

    def fetch(self, params):
        return {"user_id": params["user"].id, "param1": params.get("param1")}


class FailingFetcher:
    """Always fails."""

    def fetch(self, params):
        raise RuntimeError("Fetch failed")


class FallbackFetcher:
    """Always fails, but provides fallback data."""

    def fetch(self, params):
        raise RuntimeError("Fetch failed")

    def fallback_data(self, params):
        return {"fallback": True, "params": params}


class FlakyFetcher:
    """Fails on the first call and succeeds afterwards."""

    def __init__(self):
        self.calls = 0

    def fetch(self, params):
        self.calls += 1
        if self.calls == 1:
            raise ConnectionError("temporarily unavailable")
        return {"attempt": self.calls}


class OrdersFetcher(BaseFetcher):
    """Recent orders for a user."""

    def allowed_params(self):
        return frozenset({"user", "limit"})

    def required_params(self):
        return frozenset({"user"})

    def fetch(self, params):
        limit = params.get("limit", 3)
        return {"orders": list(range(limit)), "count": limit}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def test_settings():
    """Create test settings without a fetchers file."""
    return Settings(
        fetchers_file=None,
        log_level="DEBUG",
        max_workers=2,
        skip_unregistered=False,
    )


@pytest.fixture
def user():
    return SimpleNamespace(id=1, name="Test User")


@pytest.fixture
def workspace():
    return SimpleNamespace(id=7, name="Test Workspace")


@pytest.fixture
def registry():
    """A fresh registry with the sample fetchers registered."""
    reg = FetcherRegistry()
    reg.register("echo", EchoFetcher())
    reg.register("user_info", UserFetcher())
    reg.register("failing", FailingFetcher())
    reg.register("fallback", FallbackFetcher())
    yield reg
    reg.clear()


@pytest.fixture
def fetchers_module(temp_dir, monkeypatch):
    """
    Write an importable module of fetchers and put it on sys.path.
    """
    module_dir = temp_dir / "modules"
    module_dir.mkdir()
    (module_dir / "sample_fetchers.py").write_text(
        '''
class ProfileFetcher:
    """Profile data for a user."""

    def fetch(self, params):
        return {"profile": params.get("user", "anonymous")}


class BrokenFetcher:
    """Always fails."""

    def fetch(self, params):
        raise RuntimeError("backend down")

    def fallback_data(self, params):
        return {"profile": None}


class NeedsArgs:
    def __init__(self, token):
        self.token = token

    def fetch(self, params):
        return {}


def lookup():
    return None


static_fetcher = ProfileFetcher()
'''
    )
    monkeypatch.syspath_prepend(str(module_dir))
    yield "sample_fetchers"


@pytest.fixture
def fetchers_file(temp_dir, fetchers_module):
    """YAML fetchers file pointing at the sample module."""
    config = {
        "fetchers": {
            "profile": f"{fetchers_module}:ProfileFetcher",
            "broken": {"target": f"{fetchers_module}:BrokenFetcher"},
            "disabled": {"target": f"{fetchers_module}:ProfileFetcher", "enabled": False},
        }
    }
    path = temp_dir / "fetchers.yml"
    with open(path, "w") as f:
        yaml.dump(config, f)
    return path
