"""Unit tests for SourceRegistry."""

from unittest.mock import MagicMock

import pytest

from refconfig.config import registry as registry_module
from refconfig.config.errors import ReferenceSourceNotFoundError
from refconfig.config.registry import ENV_SOURCE, THIS_SOURCE, SourceRegistry
from refconfig.config.store import EnvStore, KeyValueStore


class TestSourceRegistry:
    """Tests for registry construction and lookup."""

    def test_reserved_sources_always_present(self) -> None:
        primary = KeyValueStore()
        registry = SourceRegistry(primary)
        assert registry[THIS_SOURCE] is primary
        assert isinstance(registry[ENV_SOURCE], EnvStore)

    def test_caller_sources_registered(self) -> None:
        vault = KeyValueStore({"k": "v"}, name="vault")
        registry = SourceRegistry(KeyValueStore(), {"vault": vault})
        assert registry["vault"] is vault
        assert set(registry) == {"this", "env", "vault"}
        assert len(registry) == 3

    def test_reserved_names_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Caller sources named this/env are ignored with a warning."""
        logger = MagicMock()
        monkeypatch.setattr(registry_module, "logger", logger)
        primary = KeyValueStore()
        impostor = KeyValueStore(name="impostor")

        registry = SourceRegistry(primary, {"this": impostor, "env": impostor})

        assert registry[THIS_SOURCE] is primary
        assert registry[ENV_SOURCE] is not impostor
        shadowed = {call.kwargs["source"] for call in logger.warning.call_args_list}
        assert shadowed == {"this", "env"}

    def test_injected_env_source(self) -> None:
        env = EnvStore({"FOO": "bar"})
        registry = SourceRegistry(KeyValueStore(), env=env)
        assert registry[ENV_SOURCE] is env

    def test_require_unknown_source(self) -> None:
        registry = SourceRegistry(KeyValueStore())
        with pytest.raises(ReferenceSourceNotFoundError) as exc_info:
            registry.require("vault", "db.password")
        assert exc_info.value.source_name == "vault"
        assert exc_info.value.key == "db.password"
        assert "vault" in str(exc_info.value)

    def test_primary_property(self) -> None:
        primary = KeyValueStore()
        assert SourceRegistry(primary).primary is primary
