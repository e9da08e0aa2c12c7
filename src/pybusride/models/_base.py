"""Base model for pybusride records.

Every backend-facing model inherits from :class:`BusRideBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase record keys map
  automatically to snake_case fields (and serialize back with
  ``by_alias=True``).
* A ``model_validator(mode="before")`` that strips placeholder values
  (``None``, ``""``, ``"--"``, NaN) so the field default is used.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Placeholder strings a record may carry for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


class BusRideBaseModel(BaseModel):
    """Base for records exchanged with the backend."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip placeholder values so defaults apply."""
        if not isinstance(values, dict):
            return values
        return BusRideBaseModel._clean_dict(values)
