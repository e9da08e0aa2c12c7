"""Normalization helpers.

Centralizes defensive parsing of position and backend payloads.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def epoch_ms(value: Any) -> int | None:
    """Coerce a millisecond timestamp or datetime to int ms; the value is never rescaled."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return int(value.timestamp() * 1000)
    ts = safe_float(value)
    return int(ts) if ts is not None else None


def to_epoch_ms(value: Any) -> int | None:
    """Coerce an epoch timestamp (seconds **or** milliseconds) or datetime to epoch ms.

    Only for loosely typed external payloads: values below the threshold
    are read as seconds.
    """
    if isinstance(value, datetime):
        return epoch_ms(value)
    ts = safe_float(value)
    if ts is None:
        return None
    if ts < _MS_THRESHOLD:
        ts *= 1000
    return int(ts)


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 string (``Z`` suffix allowed) into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def to_iso8601(value: datetime) -> str:
    """Format *value* as an ISO 8601 UTC string with millisecond precision and ``Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
