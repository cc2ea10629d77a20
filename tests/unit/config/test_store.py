"""Unit tests for KeyValueStore and EnvStore."""

import threading

import pytest

from refconfig.config.errors import ConfigError
from refconfig.config.store import (
    EnvStore,
    KeyValueStore,
    join_key,
    split_key,
    to_env_name,
)


class TestKeyValueStoreGet:
    """Tests for reading values."""

    def test_nested_lookup(self) -> None:
        """Dotted keys walk nested mappings."""
        store = KeyValueStore({"server": {"http": {"port": 8080}}})
        assert store.get("server.http.port") == 8080

    def test_missing_key_returns_none(self) -> None:
        store = KeyValueStore({"a": 1})
        assert store.get("b") is None
        assert store.get("a.b") is None

    def test_keys_are_case_insensitive(self) -> None:
        """Keys are normalized to lower case on write and read."""
        store = KeyValueStore({"Server": {"Port": 1}})
        assert store.get("server.port") == 1
        assert store.get("SERVER.PORT") == 1

    def test_subtree_is_a_copy(self) -> None:
        """Returned mappings do not alias the store."""
        store = KeyValueStore({"a": {"b": 1}})
        subtree = store.get("a")
        subtree["b"] = 2
        assert store.get("a.b") == 1

    def test_empty_key_returns_none(self) -> None:
        assert KeyValueStore({"a": 1}).get("") is None

    def test_is_set(self) -> None:
        store = KeyValueStore({"a": {"b": 1}, "n": None})
        assert store.is_set("a.b") is True
        assert store.is_set("a") is True
        assert store.is_set("n") is False
        assert store.is_set("missing") is False


class TestKeyValueStoreWrite:
    """Tests for set and set_default."""

    def test_set_overwrites(self) -> None:
        store = KeyValueStore({"a": 1})
        store.set("a", 2)
        assert store.get("a") == 2

    def test_set_creates_intermediate_mappings(self) -> None:
        store = KeyValueStore()
        store.set("a.b.c", "x")
        assert store.get("a") == {"b": {"c": "x"}}

    def test_set_replaces_scalar_on_path(self) -> None:
        store = KeyValueStore({"a": "scalar"})
        store.set("a.b", 1)
        assert store.get("a.b") == 1

    def test_set_default_does_not_clobber(self) -> None:
        """A second default is ignored; set still overrides."""
        store = KeyValueStore()
        store.set_default("x", 1)
        store.set_default("x", 2)
        assert store.get("x") == 1
        store.set("x", 2)
        assert store.get("x") == 2

    def test_default_never_hides_value(self) -> None:
        store = KeyValueStore({"x": "value"})
        store.set_default("x", "default")
        assert store.get("x") == "value"

    def test_defaults_merge_into_mappings(self) -> None:
        """Mappings present in both layers are deep merged, values winning."""
        store = KeyValueStore({"db": {"host": "prod"}})
        store.set_default("db.host", "localhost")
        store.set_default("db.port", 5432)
        assert store.get("db") == {"host": "prod", "port": 5432}

    @pytest.mark.parametrize("key", ["", "a..b", ".a"])
    def test_invalid_keys_rejected(self, key: str) -> None:
        with pytest.raises(ConfigError):
            KeyValueStore().set(key, 1)


class TestKeyValueStoreKeys:
    """Tests for all_keys and all_settings."""

    def test_all_keys_flattens_leaves(self) -> None:
        store = KeyValueStore({"a": {"b": 1, "c": {"d": 2}}, "e": [1, 2]})
        assert store.all_keys() == ["a.b", "a.c.d", "e"]

    def test_all_keys_includes_defaults(self) -> None:
        store = KeyValueStore({"a": 1})
        store.set_default("b.c", 2)
        assert store.all_keys() == ["a", "b.c"]

    def test_all_settings_merges_layers(self) -> None:
        store = KeyValueStore({"a": 1})
        store.set_default("b", 2)
        assert store.all_settings() == {"a": 1, "b": 2}

    def test_concurrent_writes(self) -> None:
        """Writes from several threads all land."""
        store = KeyValueStore()

        def writer(n: int) -> None:
            for i in range(100):
                store.set(f"t{n}.k{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.all_keys()) == 400


class TestEnvStore:
    """Tests for the environment-backed source."""

    def test_reads_upper_cased_key(self) -> None:
        store = EnvStore({"FOO": "bar"})
        assert store.get("FOO") == "bar"
        assert store.get("foo") == "bar"

    def test_dots_and_dashes_map_to_underscores(self) -> None:
        store = EnvStore({"DB_PASSWORD": "secret", "MY_VAR": "v"})
        assert store.get("db.password") == "secret"
        assert store.get("my-var") == "v"

    def test_missing_returns_none(self) -> None:
        assert EnvStore({}).get("nope") is None

    def test_is_set(self) -> None:
        store = EnvStore({"DB_PASSWORD": "secret"})
        assert store.is_set("db.password") is True
        assert store.is_set("db.user") is False

    def test_defaults_to_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REFCONFIG_TEST_VALUE", "from-env")
        assert EnvStore().get("REFCONFIG_TEST_VALUE") == "from-env"

    def test_not_enumerated(self) -> None:
        assert EnvStore({"FOO": "bar"}).all_keys() == []

    def test_read_only(self) -> None:
        with pytest.raises(ConfigError):
            EnvStore({}).set("FOO", "bar")


class TestKeyHelpers:
    """Tests for key helpers."""

    def test_split_key(self) -> None:
        assert split_key("A.b.C") == ["a", "b", "c"]
        assert split_key("") == []

    def test_join_key_skips_empty(self) -> None:
        assert join_key("foo", "bar") == "foo.bar"
        assert join_key("", "bar") == "bar"
        assert join_key("foo", "") == "foo"

    def test_to_env_name(self) -> None:
        assert to_env_name("db.read-replica.host") == "DB_READ_REPLICA_HOST"
