"""Key-value sources addressed by dotted keys.

``KeyValueStore`` is the mutable, layered store a Config reads from and writes
to. ``EnvStore`` is a read-only source backed by process environment
variables.
"""

import copy
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import Any

from refconfig.config.errors import ConfigError
from refconfig.config.loader import deep_merge

KEY_DELIMITER = "."

_MISSING = object()


class ConfigSource(ABC):
    """Read interface shared by every source a reference can point at."""

    name: str

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value at a dotted key, or None if absent."""
        pass

    @abstractmethod
    def all_keys(self) -> list[str]:
        """Return every fully-qualified leaf key."""
        pass

    def is_set(self, key: str) -> bool:
        return self.get(key) is not None


class KeyValueStore(ConfigSource):
    """Nested, case-insensitive store with a values layer and a defaults layer.

    Keys are lower-cased and split on ``.``. ``set`` writes the values layer,
    ``set_default`` writes the defaults layer and keeps the first default it
    was given. ``get`` prefers values over defaults and deep-merges mappings
    present in both.

    All operations hold a re-entrant lock, so a store may be shared between
    threads and between the prefix views built over it.
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        name: str = "store",
    ) -> None:
        self.name = name
        self._lock = threading.RLock()
        self._values: dict[str, Any] = _normalize_mapping(data or {})
        self._defaults: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"KeyValueStore(name={self.name!r}, keys={len(self.all_keys())})"

    def get(self, key: str) -> Any | None:
        parts = split_key(key)
        if not parts:
            return None

        with self._lock:
            value = _lookup(self._values, parts)
            default = _lookup(self._defaults, parts)

            if value is not _MISSING and value is not None:
                if isinstance(value, dict) and isinstance(default, dict):
                    return deep_merge(copy.deepcopy(default), copy.deepcopy(value))
                return _detach(value)

            if default is not _MISSING and default is not None:
                return _detach(default)

            return None

    def set(self, key: str, value: Any) -> None:
        """Write a value, overwriting whatever the key held."""
        parts = _require_parts(key)
        with self._lock:
            _assign(self._values, parts, _normalize_value(value))

    def set_default(self, key: str, value: Any) -> None:
        """Register a fallback value used only while the key has no value.

        A second default for the same key is ignored.
        """
        parts = _require_parts(key)
        with self._lock:
            existing = _lookup(self._defaults, parts)
            if existing is not _MISSING and existing is not None:
                return
            _assign(self._defaults, parts, _normalize_value(value))

    def all_keys(self) -> list[str]:
        with self._lock:
            keys = set(_flatten(self._defaults))
            keys.update(_flatten(self._values))
        return sorted(keys)

    def all_settings(self) -> dict[str, Any]:
        """Return a deep copy of the merged tree."""
        with self._lock:
            return deep_merge(copy.deepcopy(self._defaults), copy.deepcopy(self._values))


class EnvStore(ConfigSource):
    """Read-only source over environment variables.

    ``db.password`` is looked up as ``DB_PASSWORD``. The environment is never
    enumerated, so ``all_keys`` is empty.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        name: str = "env",
    ) -> None:
        self.name = name
        self._environ = environ if environ is not None else os.environ

    def __repr__(self) -> str:
        return f"EnvStore(name={self.name!r})"

    def get(self, key: str) -> Any | None:
        if not key:
            return None
        return self._environ.get(to_env_name(key))

    def all_keys(self) -> list[str]:
        return []

    def set(self, key: str, value: Any) -> None:  # noqa: ARG002
        raise ConfigError(f"environment source is read-only (key '{key}')")


def to_env_name(key: str) -> str:
    """Convert a dotted key to an environment variable name."""
    return key.upper().replace(".", "_").replace("-", "_")


def split_key(key: str) -> list[str]:
    """Split a dotted key into lower-cased segments."""
    if not key:
        return []
    return key.lower().split(KEY_DELIMITER)


def join_key(*parts: str) -> str:
    """Join key segments, skipping empty ones."""
    return KEY_DELIMITER.join(part for part in parts if part)


def _require_parts(key: str) -> list[str]:
    parts = split_key(key)
    if not parts or any(not part for part in parts):
        raise ConfigError(f"invalid config key: '{key}'")
    return parts


def _lookup(tree: dict[str, Any], parts: list[str]) -> Any:
    node: Any = tree
    for part in parts:
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _assign(tree: dict[str, Any], parts: list[str], value: Any) -> None:
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _flatten(tree: dict[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in tree.items():
        full_key = join_key(prefix, key)
        if isinstance(value, dict) and value:
            yield from _flatten(value, full_key)
        elif value is not None:
            yield full_key


def _normalize_mapping(data: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key).lower(): _normalize_value(value) for key, value in data.items()}


def _normalize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _normalize_mapping(value)
    if isinstance(value, list):
        return [_normalize_value(item) for item in value]
    return value


def _detach(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return copy.deepcopy(value)
    return value
