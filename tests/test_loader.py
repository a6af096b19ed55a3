"""
Tests for registry bootstrap from configuration.
"""

import pytest

from contextkit.errors import ConfigurationError, ValidationError
from contextkit.fetch.loader import (
    bootstrap_registry,
    import_object,
    load_fetcher,
    load_registry_file,
    register_from_mapping,
)
from contextkit.fetch.registry import FetcherRegistry
from contextkit.settings import Settings


class TestImportObject:
    """Test cases for import_object and load_fetcher."""

    def test_colon_form(self):
        assert import_object("os.path:join").__name__ == "join"

    def test_dotted_form(self):
        assert import_object("os.path.join").__name__ == "join"

    @pytest.mark.parametrize("path", ["", "nodots", ":attr", "module:", None])
    def test_invalid_paths(self, path):
        with pytest.raises(ConfigurationError):
            import_object(path)

    def test_missing_module(self):
        with pytest.raises(ConfigurationError, match="Cannot import module"):
            import_object("definitely_not_a_module_xyz:Thing")

    def test_missing_attribute(self, fetchers_module):
        with pytest.raises(ConfigurationError, match="Cannot resolve"):
            import_object(f"{fetchers_module}:Missing")

    def test_load_fetcher_instantiates_classes(self, fetchers_module):
        fetcher = load_fetcher(f"{fetchers_module}:ProfileFetcher")
        assert type(fetcher).__name__ == "ProfileFetcher"

    def test_load_fetcher_keeps_instances(self, fetchers_module):
        fetcher = load_fetcher(f"{fetchers_module}:static_fetcher")
        assert fetcher is import_object(f"{fetchers_module}:static_fetcher")

    def test_load_fetcher_instantiation_failure(self, fetchers_module):
        with pytest.raises(ConfigurationError, match="Cannot instantiate"):
            load_fetcher(f"{fetchers_module}:NeedsArgs")


class TestRegisterFromMapping:
    """Test cases for register_from_mapping."""

    def test_registers_targets(self, fetchers_module):
        registry = FetcherRegistry()

        keys = register_from_mapping(
            registry,
            {
                "profile": f"{fetchers_module}:ProfileFetcher",
                "broken": {"target": f"{fetchers_module}:BrokenFetcher"},
            },
        )

        assert keys == ["profile", "broken"]
        assert registry.get_entry("broken").has_fallback is True

    def test_skips_disabled(self, fetchers_module):
        registry = FetcherRegistry()
        keys = register_from_mapping(
            registry,
            {"off": {"target": f"{fetchers_module}:ProfileFetcher", "enabled": False}},
        )
        assert keys == []
        assert len(registry) == 0

    def test_missing_target(self):
        with pytest.raises(ConfigurationError, match="has no import target"):
            register_from_mapping(FetcherRegistry(), {"nothing": {}})

    def test_target_without_fetch_is_rejected(self, fetchers_module):
        with pytest.raises(ValidationError):
            register_from_mapping(FetcherRegistry(), {"lookup": f"{fetchers_module}:lookup"})


class TestLoadRegistryFile:
    """Test cases for YAML bootstrap files."""

    def test_load_file(self, fetchers_file):
        registry = load_registry_file(fetchers_file)

        assert registry.keys() == frozenset({"profile", "broken"})
        assert registry.get("profile").fetch({"user": "ada"}) == {"profile": "ada"}

    def test_load_into_existing_registry(self, fetchers_file):
        registry = FetcherRegistry()
        result = load_registry_file(str(fetchers_file), registry)
        assert result is registry
        assert "profile" in registry

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError, match="not found"):
            load_registry_file(temp_dir / "missing.yml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "bad.yml"
        path.write_text("fetchers: [unclosed")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_registry_file(path)

    def test_non_mapping_document(self, temp_dir):
        path = temp_dir / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_registry_file(path)

    def test_fetchers_not_a_mapping(self, temp_dir):
        path = temp_dir / "list.yml"
        path.write_text("fetchers:\n  - a\n")
        with pytest.raises(ConfigurationError, match="'fetchers' must be a mapping"):
            load_registry_file(path)

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yml"
        path.write_text("")
        assert len(load_registry_file(path)) == 0


class TestBootstrapRegistry:
    """Test cases for bootstrap_registry."""

    def test_empty_without_file(self, test_settings):
        registry = bootstrap_registry(test_settings)
        assert isinstance(registry, FetcherRegistry)
        assert len(registry) == 0

    def test_from_settings(self, fetchers_file):
        registry = bootstrap_registry(Settings(fetchers_file=fetchers_file))
        assert registry.keys() == frozenset({"profile", "broken"})

    def test_explicit_file_wins(self, fetchers_file, temp_dir):
        settings = Settings(fetchers_file=temp_dir / "missing.yml")
        registry = bootstrap_registry(settings, fetchers_file=fetchers_file)
        assert "profile" in registry

    def test_fresh_registry_each_time(self, fetchers_file):
        settings = Settings(fetchers_file=fetchers_file)
        assert bootstrap_registry(settings) is not bootstrap_registry(settings)
