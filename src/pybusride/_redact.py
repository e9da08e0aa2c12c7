"""Credential scrubbing for DEBUG logs.

Record requests carry the API key in a header; report bodies and peer rows
are logged as-is apart from over-long strings.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"

_SECRET_KEYS = frozenset({"apikey", "api_key", "x-api-key", "authorization", "cookie", "password", "token"})
_MAX_DEPTH = 20


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}…<truncated>"


def _scrub_mapping(value: Mapping[Any, Any], limit: int, depth: int) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for raw_key, item in value.items():
        key = str(raw_key)
        out[key] = REDACTED if key.lower() in _SECRET_KEYS else redact_for_log(item, max_string=limit, _depth=depth)
    return out


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Copy of *value* with secret-bearing keys replaced by ``<redacted>``.

    Pydantic models are dumped by alias first, so a report logs with the
    same keys it is sent with.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, mode="json")
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _truncate(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return _scrub_mapping(value, max_string, _depth + 1)
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
