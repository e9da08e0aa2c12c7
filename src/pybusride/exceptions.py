"""Custom exception hierarchy for pybusride."""

from __future__ import annotations


class BusRideError(Exception):
    """Base exception for all pybusride errors."""


class BusRideConfigError(BusRideError):
    """Invalid or missing configuration (including degenerate route data)."""


class BusRideTransportError(BusRideError):
    """HTTP-level failure talking to the records backend (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
