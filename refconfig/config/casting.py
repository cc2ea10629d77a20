"""Conversions from raw config values to typed values.

Coercion is delegated to pydantic in lax mode. A few shapes pydantic does not
accept are handled first: Go-style duration strings (``1h30m``, ``250ms``),
whitespace-separated string lists and JSON object strings.

Every function raises ``ValueError`` or ``TypeError`` when the value cannot be
converted; ``Config`` turns those into ``CastError``.
"""

import json
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

GO_DURATION_PATTERN = re.compile(
    r"([-+]?)((?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+)"
)
_DURATION_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)")

_UNIT_SECONDS = {
    "ns": Decimal("1e-9"),
    "us": Decimal("1e-6"),
    "µs": Decimal("1e-6"),
    "μs": Decimal("1e-6"),
    "ms": Decimal("1e-3"),
    "s": Decimal(1),
    "m": Decimal(60),
    "h": Decimal(3600),
}

Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]
Int64 = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


def _parse_go_duration_string(value: Any) -> Any:
    if isinstance(value, str) and GO_DURATION_PATTERN.fullmatch(value.strip()):
        return parse_go_duration(value)
    return value


# timedelta that also accepts Go-style strings; usable as a model field type
Duration = Annotated[timedelta, BeforeValidator(_parse_go_duration_string)]

_BOOL = TypeAdapter(bool)
_FLOAT = TypeAdapter(float)
_INT = TypeAdapter(int)
_INT32 = TypeAdapter(Int32)
_INT64 = TypeAdapter(Int64)
_INT_LIST = TypeAdapter(list[int])
_STR_LIST = TypeAdapter(list[str], config=ConfigDict(coerce_numbers_to_str=True))
_STR_MAP = TypeAdapter(dict[str, Any])
_DATETIME = TypeAdapter(datetime)
_DURATION = TypeAdapter(Duration)


def to_bool(value: Any) -> bool:
    return _BOOL.validate_python(value)


def to_float(value: Any) -> float:
    return _FLOAT.validate_python(value)


def to_int(value: Any) -> int:
    return _INT.validate_python(value)


def to_int32(value: Any) -> int:
    return _INT32.validate_python(value)


def to_int64(value: Any) -> int:
    return _INT64.validate_python(value)


def to_int_slice(value: Any) -> list[int]:
    return _INT_LIST.validate_python(value)


def to_string(value: Any) -> str:
    """Render a scalar as a string.

    Booleans render as ``true``/``false`` so that values round-trip through
    TOML and environment variables unchanged.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    raise TypeError(f"{type(value).__name__} is not a scalar")


def to_string_map(value: Any) -> dict[str, Any]:
    """Convert a mapping, or a JSON object string, to ``dict[str, Any]``."""
    if isinstance(value, str):
        value = json.loads(value)
    return _STR_MAP.validate_python(value)


def to_string_slice(value: Any) -> list[str]:
    """Convert a list to ``list[str]``; a plain string is split on whitespace."""
    if isinstance(value, str):
        return value.split()
    return _STR_LIST.validate_python(value)


def to_time(value: Any) -> datetime:
    """Convert ISO 8601 strings, unix timestamps and dates to a datetime."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return _DATETIME.validate_python(value)


def to_duration(value: Any) -> timedelta:
    """Convert a value to a timedelta.

    Accepts Go-style strings (``1h30m``, ``1.5s``, ``-250ms``), numbers and
    numeric strings, and anything pydantic accepts (``PT5M``, ``01:30:00``).

    Unit-less numbers are seconds, not nanoseconds as in Go's ``time``
    conventions: ``timeout = 30`` means thirty seconds.
    """
    if isinstance(value, str):
        text = value.strip()
        if _NUMBER_PATTERN.fullmatch(text):
            return _seconds_to_timedelta(float(text), value)
    return _DURATION.validate_python(value)


def parse_go_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h15m30.5s`` or ``-300ms``."""
    match = GO_DURATION_PATTERN.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"invalid duration: {text!r}")

    sign, body = match.groups()
    seconds = sum(
        Decimal(amount) * _UNIT_SECONDS[unit]
        for amount, unit in _DURATION_COMPONENT.findall(body)
    )
    if sign == "-":
        seconds = -seconds
    return _seconds_to_timedelta(float(seconds), text)


def _seconds_to_timedelta(seconds: float, raw: Any) -> timedelta:
    try:
        return timedelta(seconds=seconds)
    except OverflowError as e:
        raise ValueError(f"duration out of range: {raw!r}") from e


def describe_cast_failure(error: Exception) -> str:
    """Return a one-line reason for a failed conversion."""
    if isinstance(error, ValidationError):
        return "; ".join(str(detail["msg"]) for detail in error.errors())
    return str(error)
