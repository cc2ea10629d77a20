"""Layered configuration with cross-source references.

A Config wraps a primary key-value store plus named reference sources. Values
of the form ``${source:key.path}`` are replaced, at construction time, by the
value they point at. Two sources are always registered: ``this`` (the primary
store) and ``env`` (environment variables).

Usage:
    from refconfig.config import new_config_from_paths

    config = new_config_from_paths(
        "config/default.toml",
        {"vault": "config/references/vault.toml"},
    )
    port = config.get_int("server.port")
    db = config.of("database")
    timeout = db.get_duration("timeout")
"""

from refconfig.config.casting import Duration
from refconfig.config.config import (
    Config,
    load_from_config_dir,
    new_config,
    new_config_from_paths,
    to_model,
)
from refconfig.config.errors import (
    CastError,
    CircularReferenceError,
    ConfigDecodeError,
    ConfigError,
    ConfigLoadError,
    FatalConfigError,
    KeyNotFoundError,
    ReferenceKeyNotFoundError,
    ReferenceSourceNotFoundError,
)
from refconfig.config.reference import ReferenceToken, format_reference, parse_reference
from refconfig.config.registry import ENV_SOURCE, THIS_SOURCE, SourceRegistry
from refconfig.config.resolver import ReferenceResolver, resolve_all
from refconfig.config.store import ConfigSource, EnvStore, KeyValueStore
from refconfig.config.wrapper import ConfigWrapper, apply_wrappers, with_defaults, with_prefix

__all__ = [
    "Config",
    "new_config",
    "new_config_from_paths",
    "load_from_config_dir",
    "to_model",
    "Duration",
    "ConfigSource",
    "KeyValueStore",
    "EnvStore",
    "SourceRegistry",
    "THIS_SOURCE",
    "ENV_SOURCE",
    "ReferenceToken",
    "parse_reference",
    "format_reference",
    "ReferenceResolver",
    "resolve_all",
    "ConfigWrapper",
    "apply_wrappers",
    "with_prefix",
    "with_defaults",
    "ConfigError",
    "FatalConfigError",
    "ReferenceSourceNotFoundError",
    "ReferenceKeyNotFoundError",
    "CircularReferenceError",
    "KeyNotFoundError",
    "CastError",
    "ConfigDecodeError",
    "ConfigLoadError",
]
