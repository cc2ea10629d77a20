"""Config: a resolved primary store with typed accessors and prefix views.

Usage:
    from refconfig import Config

    config = Config(
        {"db": {"password": "${vault:db.password}", "timeout": "5s"}},
        references={"vault": {"db": {"password": "hunter2"}}},
    )
    config.get_string("db.password")        # "hunter2"
    config.of("db").get_duration("timeout")  # timedelta(seconds=5)

References are resolved once, when the Config is built. Values written later
through ``set``/``set_default`` are stored as-is, even if they look like a
reference.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from refconfig.config import casting
from refconfig.config.errors import CastError, ConfigDecodeError, KeyNotFoundError
from refconfig.config.loader import (
    find_reference_paths,
    get_config_dir,
    load_config,
    load_file,
)
from refconfig.config.registry import THIS_SOURCE, SourceRegistry
from refconfig.config.resolver import resolve_all
from refconfig.config.store import (
    ConfigSource,
    EnvStore,
    KeyValueStore,
    join_key,
)
from refconfig.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SourceLike = ConfigSource | Mapping[str, Any]


class Config:
    """Layered configuration over a primary store and named reference sources.

    A Config built with ``of`` is a view: it shares the store and registry of
    its parent and only differs in the key prefix it applies.
    """

    def __init__(
        self,
        primary: KeyValueStore | Mapping[str, Any] | None = None,
        references: Mapping[str, SourceLike] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Build the registry and resolve every reference in the primary store.

        Args:
            primary: Primary store (shared, not copied) or a plain mapping
            references: Auxiliary sources by name; mappings are wrapped in stores
            environ: Environment for the ``env`` source (defaults to os.environ)

        Raises:
            FatalConfigError: If a reference names an unknown source, a missing
                key, or forms a cycle
        """
        if isinstance(primary, KeyValueStore):
            store = primary
        else:
            store = KeyValueStore(primary or {}, name=THIS_SOURCE)

        sources = {
            name: _as_source(name, source) for name, source in (references or {}).items()
        }
        env = EnvStore(environ) if environ is not None else None

        self._store = store
        self._registry = SourceRegistry(store, sources, env=env)
        self._prefix = ""

        resolved = resolve_all(self._registry)
        logger.info(
            "config_resolved",
            keys=len(store.all_keys()),
            references=resolved,
            sources=sorted(self._registry),
        )

    @classmethod
    def _view(cls, store: KeyValueStore, registry: SourceRegistry, prefix: str) -> "Config":
        view = cls.__new__(cls)
        view._store = store
        view._registry = registry
        view._prefix = prefix
        return view

    def __repr__(self) -> str:
        return f"Config(prefix={self._prefix!r}, sources={sorted(self._registry)})"

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def sources(self) -> SourceRegistry:
        return self._registry

    def key(self, key: str) -> str:
        """Compose the view prefix with a relative key."""
        return join_key(self._prefix, key)

    def of(self, prefix: str) -> "Config":
        """Return a view rooted at ``prefix`` below this one.

        Example:
            cfg.get_string("foo.bar") == cfg.of("foo").get_string("bar")
        """
        return Config._view(self._store, self._registry, self.key(prefix))

    # Untyped access

    def get(self, key: str) -> Any:
        """Get the raw value at a key.

        Raises:
            KeyNotFoundError: If the key has no value
        """
        full_key = self.key(key)
        value = self._store.get(full_key)
        if value is None:
            raise KeyNotFoundError(full_key)
        return value

    def exists(self, key: str) -> bool:
        return self._store.is_set(self.key(key))

    def set(self, key: str, value: Any) -> None:
        """Set a value, overwriting any existing one. No reference resolution."""
        self._store.set(self.key(key), value)

    def set_default(self, key: str, value: Any) -> None:
        """Set a fallback used only while the key has no value."""
        self._store.set_default(self.key(key), value)

    def all_keys(self) -> list[str]:
        """Return leaf keys below this view, relative to its prefix."""
        keys = self._store.all_keys()
        if not self._prefix:
            return keys

        head = self._prefix.lower() + "."
        return [key[len(head):] for key in keys if key.startswith(head)]

    def all_settings(self) -> dict[str, Any]:
        """Return a copy of the nested settings below this view."""
        if not self._prefix:
            return self._store.all_settings()
        value = self._store.get(self._prefix)
        return value if isinstance(value, dict) else {}

    # Typed access

    def get_bool(self, key: str) -> bool:
        return self._get_typed(key, casting.to_bool, "bool")

    def get_duration(self, key: str) -> timedelta:
        return self._get_typed(key, casting.to_duration, "duration")

    def get_float(self, key: str) -> float:
        return self._get_typed(key, casting.to_float, "float")

    def get_int(self, key: str) -> int:
        return self._get_typed(key, casting.to_int, "int")

    def get_int32(self, key: str) -> int:
        return self._get_typed(key, casting.to_int32, "int32")

    def get_int64(self, key: str) -> int:
        return self._get_typed(key, casting.to_int64, "int64")

    def get_int_slice(self, key: str) -> list[int]:
        return self._get_typed(key, casting.to_int_slice, "list[int]")

    def get_string(self, key: str) -> str:
        return self._get_typed(key, casting.to_string, "str")

    def get_string_map(self, key: str) -> dict[str, Any]:
        return self._get_typed(key, casting.to_string_map, "dict[str, Any]")

    def get_string_slice(self, key: str) -> list[str]:
        return self._get_typed(key, casting.to_string_slice, "list[str]")

    def get_time(self, key: str) -> datetime:
        return self._get_typed(key, casting.to_time, "datetime")

    def to_model(self, key: str, model_type: type[T]) -> T:
        """Decode the subtree at ``key`` into ``model_type``.

        ``model_type`` may be anything pydantic can validate: a BaseModel, a
        dataclass, a TypedDict or a builtin container. Field names must be
        lower case since store keys are. A missing subtree decodes from ``{}``.

        Raises:
            ConfigDecodeError: If the subtree does not fit the type. Unlike the
                typed getters this is meant to be caught.
        """
        full_key = self.key(key)
        raw = self._store.get(full_key)
        if raw is None:
            raw = {}

        try:
            return TypeAdapter(model_type).validate_python(raw)
        except ValidationError as e:
            raise ConfigDecodeError(
                full_key,
                getattr(model_type, "__name__", repr(model_type)),
                e.errors(include_url=False),
            ) from e

    def _get_typed(self, key: str, caster: Callable[[Any], T], target: str) -> T:
        value = self.get(key)
        try:
            return caster(value)
        except (ValueError, TypeError, OverflowError) as e:
            raise CastError(self.key(key), value, target, casting.describe_cast_failure(e)) from e


def _as_source(name: str, source: SourceLike) -> ConfigSource:
    if isinstance(source, ConfigSource):
        return source
    return KeyValueStore(source, name=name)


def new_config(
    primary: KeyValueStore | Mapping[str, Any],
    references: Mapping[str, SourceLike] | None = None,
) -> Config:
    """Build and resolve a Config from in-memory sources."""
    return Config(primary, references)


def new_config_from_paths(
    path: str | Path,
    reference_paths: Mapping[str, str | Path] | None = None,
) -> Config:
    """Load the primary and reference sources from files, then build a Config.

    Raises:
        ConfigLoadError: If any file is missing, unsupported or malformed
        FatalConfigError: If reference resolution fails
    """
    primary = KeyValueStore(load_file(path), name=THIS_SOURCE)
    references = {
        name: KeyValueStore(load_file(ref_path), name=name)
        for name, ref_path in (reference_paths or {}).items()
    }
    return Config(primary, references)


def load_from_config_dir(config_dir: Path | None = None, env: str | None = None) -> Config:
    """Build a Config from a config directory.

    The primary store is ``default.toml`` overlaid with ``{env}.toml``. Each
    file under ``references/`` becomes a source named after its stem.
    """
    config_dir = config_dir or get_config_dir()
    reference_paths = find_reference_paths(config_dir)

    primary = KeyValueStore(load_config(config_dir, env), name=THIS_SOURCE)
    references = {
        name: KeyValueStore(load_file(path), name=name)
        for name, path in reference_paths.items()
    }
    logger.info(
        "config_loaded",
        config_dir=str(config_dir),
        references=sorted(references),
    )
    return Config(primary, references)


def to_model(config: Config, key: str, model_type: type[T]) -> T:
    """Decode a config subtree into ``model_type``. See ``Config.to_model``."""
    return config.to_model(key, model_type)
