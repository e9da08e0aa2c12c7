"""Ride session record."""

from __future__ import annotations

import secrets
import string
import time

from pydantic import BaseModel, ConfigDict, Field

from pybusride.state.machine import RideState, RideStatus

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_session_id(now_ms: int | None = None) -> str:
    """Opaque session id, ``session_<epoch ms>_<9 random chars>``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"session_{stamp}_{suffix}"


class RideSession(BaseModel):
    """Per-session ride state, replaced (never mutated) on every decision.

    Parameters
    ----------
    session_id : str
        Generated once per tracker; keys every location report.
    ride_flag : bool
        Whether the session is currently believed to be on a bus.
    state : RideState
        Explicit state derived from the last decision.
    last_status : str
        Last status string shown to the user.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    session_id: str = Field(default_factory=new_session_id, min_length=1)
    ride_flag: bool = False
    state: RideState = RideState.IDLE
    last_status: str = RideStatus.INITIALIZING.value
