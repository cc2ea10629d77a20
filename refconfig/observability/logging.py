"""Structured logging configuration using structlog.

Provides JSON logging for production and console logging for development,
with redaction of values whose key names look like secrets. Resolved
references often carry credentials pulled from ``env`` or a vault source,
so redaction is on by default.
"""

import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Key fragments that mark a value as secret
SECRET_KEY_FRAGMENTS: frozenset[str] = frozenset({
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "private_key",
    "access_key",
})

REDACTED = "[REDACTED]"


def is_secret_key(key: str) -> bool:
    """Return True if a key name looks like it holds a secret.

    Matches both log field names and dotted config keys
    (``database.password``, ``AWS_SECRET_ACCESS_KEY``).
    """
    key_lower = key.lower().replace("-", "_")
    return any(fragment in key_lower for fragment in SECRET_KEY_FRAGMENTS)


class SecretRedactor:
    """Processor that masks secret values in log events.

    A field is masked when its own name looks secret, or when it is a
    ``value`` field logged next to a ``key`` field that does.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """Redact secrets from event dictionary."""
        return cast(EventDict, self._redact_dict(event_dict))

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        config_key = data.get("key")
        masks_value = isinstance(config_key, str) and is_secret_key(config_key)

        result: dict[str, Any] = {}
        for key, value in data.items():
            if is_secret_key(key) or (masks_value and key == "value"):
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            else:
                result[key] = value
        return result


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_secrets: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact_secrets: Whether to mask secret-looking values
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_secrets:
        processors.append(SecretRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_map = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    level_num = level_map.get(level.upper(), 20)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        A bound structlog logger
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
