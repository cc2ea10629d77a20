"""Configuration exception hierarchy.

There are two tiers:

* ``FatalConfigError`` covers wiring defects found while building or reading a
  config (unknown reference source, missing key, failed cast). These are meant
  to stop the process at boot.
* ``ConfigDecodeError`` covers decoding a subtree into a caller type. Callers
  are expected to catch it and decide what to do.

``ConfigLoadError`` is raised while reading sources from disk.
"""

from typing import Any

from refconfig.observability.logging import REDACTED, is_secret_key


class ConfigError(Exception):
    """Base exception for all configuration errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class FatalConfigError(ConfigError):
    """Unrecoverable configuration wiring error."""

    pass


class ReferenceSourceNotFoundError(FatalConfigError):
    """Raised when a reference names a source that is not registered."""

    def __init__(self, source_name: str, key: str | None = None) -> None:
        self.source_name = source_name
        self.key = key
        message = f"no reference source registered under name '{source_name}'"
        if key is not None:
            message += f" (key '{key}')"
        super().__init__(message)


class ReferenceKeyNotFoundError(FatalConfigError):
    """Raised when a referenced source has no value for the key."""

    def __init__(self, source_name: str, key: str) -> None:
        self.source_name = source_name
        self.key = key
        super().__init__(f"no value for key '{key}' in reference source '{source_name}'")


class CircularReferenceError(FatalConfigError):
    """Raised when a reference chain loops back on itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__("circular reference: " + " -> ".join(chain))


class KeyNotFoundError(FatalConfigError):
    """Raised when a typed getter finds no value for the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"key not found in config: '{key}'")


class CastError(FatalConfigError):
    """Raised when a value cannot be converted to the requested type.

    The message masks the value when the key looks like it holds a secret.
    """

    def __init__(self, key: str, value: Any, target: str, reason: str) -> None:
        self.key = key
        self.value = value
        self.target = target

        shown = repr(value)
        if is_secret_key(key):
            shown = REDACTED
            if isinstance(value, str) and value:
                reason = reason.replace(value, REDACTED)

        super().__init__(
            f"unable to cast {shown} of type {type(value).__name__} "
            f"to {target} for key '{key}': {reason}"
        )


class ConfigDecodeError(ConfigError):
    """Raised when a config subtree cannot be decoded into a structured type."""

    def __init__(self, key: str, target: str, errors: list[dict[str, Any]]) -> None:
        self.key = key
        self.target = target
        self.errors = errors
        super().__init__(
            f"failed to decode key '{key}' into {target}: {len(errors)} error(s)"
        )


class ConfigLoadError(ConfigError):
    """Raised when a configuration source cannot be read from disk."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)
