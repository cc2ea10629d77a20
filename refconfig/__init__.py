"""refconfig: layered configuration with cross-source references.

Usage:
    from refconfig import Config

    config = Config(
        {"api": {"token": "${env:API_TOKEN}", "timeout": "30s"}},
        references={},
    )
    token = config.get_string("api.token")
    api = config.of("api")
    timeout = api.get_duration("timeout")
"""

from refconfig.config import (
    CastError,
    CircularReferenceError,
    Config,
    ConfigDecodeError,
    ConfigError,
    ConfigLoadError,
    ConfigWrapper,
    EnvStore,
    FatalConfigError,
    KeyNotFoundError,
    KeyValueStore,
    ReferenceKeyNotFoundError,
    ReferenceSourceNotFoundError,
    apply_wrappers,
    load_from_config_dir,
    new_config,
    new_config_from_paths,
    to_model,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "new_config",
    "new_config_from_paths",
    "load_from_config_dir",
    "to_model",
    "KeyValueStore",
    "EnvStore",
    "ConfigWrapper",
    "apply_wrappers",
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
