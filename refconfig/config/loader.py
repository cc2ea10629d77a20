"""Configuration file loading with deep merge support.

Sources are read from TOML or JSON files, chosen by file suffix. Loading
failures surface as ``ConfigLoadError`` so the caller decides whether to abort.
"""

import json
import os
import tomllib
from pathlib import Path
from typing import Any

from refconfig.config.errors import ConfigLoadError
from refconfig.observability.logging import get_logger
from refconfig.observability.metrics import SOURCES_LOADED

logger = get_logger(__name__)

SUPPORTED_SUFFIXES = (".toml", ".json")
REFERENCES_DIR = "references"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    The config directory can be overridden with REFCONFIG_CONFIG_DIR env var.
    Defaults to 'config/' in the current directory or one of its parents.
    """
    config_dir_env = os.environ.get("REFCONFIG_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise ConfigLoadError(f"Config directory not found: {config_dir_env}", str(path))
        return path

    current = Path.cwd()
    for _ in range(5):  # Look up to 5 levels
        config_path = current / "config"
        if config_path.exists():
            return config_path
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Get the current environment from REFCONFIG_ENV.

    Defaults to 'development' if not set.
    """
    return os.environ.get("REFCONFIG_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary.

    Raises:
        ConfigLoadError: If the file doesn't exist or is not valid TOML
    """
    if not file_path.exists():
        raise ConfigLoadError(f"Configuration file not found: {file_path}", str(file_path))

    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigLoadError(f"Invalid TOML in {file_path}: {e}", str(file_path)) from e


def load_json(file_path: Path) -> dict[str, Any]:
    """Load a JSON file whose root is an object.

    Raises:
        ConfigLoadError: If the file doesn't exist, is not valid JSON, or its
            root is not an object
    """
    if not file_path.exists():
        raise ConfigLoadError(f"Configuration file not found: {file_path}", str(file_path))

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON in {file_path}: {e}", str(file_path)) from e

    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config root must be an object: {file_path}", str(file_path))
    return data


def load_file(path: str | Path) -> dict[str, Any]:
    """Load a configuration file, picking the parser from its suffix."""
    file_path = Path(path)
    suffix = file_path.suffix.lower()

    if suffix == ".toml":
        data = load_toml(file_path)
    elif suffix == ".json":
        data = load_json(file_path)
    else:
        raise ConfigLoadError(
            f"Unsupported config file type '{suffix}' for {file_path}; "
            f"expected one of {list(SUPPORTED_SUFFIXES)}",
            str(file_path),
        )

    SOURCES_LOADED.labels(kind=suffix.lstrip(".")).inc()
    logger.debug("config_file_loaded", path=str(file_path), keys=len(data))
    return data


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    For nested dictionaries, values are merged recursively.
    For other values, override replaces base.
    """
    result = base.copy()

    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(config_dir: Path | None = None, env: str | None = None) -> dict[str, Any]:
    """Load the primary configuration from a config directory.

    Loading order:
    1. {config_dir}/default.toml (required)
    2. {config_dir}/{env}.toml (optional)

    Returns:
        Merged configuration dictionary
    """
    config_dir = config_dir or get_config_dir()
    env = env or get_environment()

    default_path = config_dir / "default.toml"
    if not default_path.exists():
        raise ConfigLoadError(
            f"Default configuration file not found: {default_path}. "
            "Create config/default.toml or set REFCONFIG_CONFIG_DIR.",
            str(default_path),
        )

    config = load_file(default_path)

    env_path = config_dir / f"{env}.toml"
    if env_path.exists():
        config = deep_merge(config, load_file(env_path))

    return config


def find_reference_paths(config_dir: Path) -> dict[str, Path]:
    """Map each file in {config_dir}/references/ to a source name.

    ``references/vault.toml`` becomes the source ``vault``.
    """
    references_dir = config_dir / REFERENCES_DIR
    if not references_dir.is_dir():
        return {}

    return {
        path.stem: path
        for path in sorted(references_dir.iterdir())
        if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES
    }
