"""Reference token grammar.

A reference is a string value of the exact form ``${source:key.path}``. It
points at ``key.path`` in the source registered as ``source``. Anything else,
including strings that merely contain a reference, is a literal.
"""

import re
from dataclasses import dataclass
from typing import Any

REFERENCE_PATTERN = re.compile(r"\$\{([A-Za-z0-9\-_]*):([A-Za-z0-9\-_.]*)\}")


@dataclass(frozen=True)
class ReferenceToken:
    """A parsed ``${source_name:key_path}`` reference."""

    source_name: str
    key_path: str

    def __str__(self) -> str:
        return format_reference(self.source_name, self.key_path)


def parse_reference(value: Any) -> ReferenceToken | None:
    """Parse a raw config value as a reference.

    Args:
        value: Any value read from a key-value store

    Returns:
        The parsed token, or None when the value is a literal
    """
    if not isinstance(value, str):
        return None

    match = REFERENCE_PATTERN.fullmatch(value)
    if match is None:
        return None

    return ReferenceToken(source_name=match.group(1), key_path=match.group(2))


def is_reference(value: Any) -> bool:
    """Return True if the value is a reference token."""
    return parse_reference(value) is not None


def format_reference(source_name: str, key_path: str) -> str:
    """Render a reference token string."""
    return f"${{{source_name}:{key_path}}}"
