"""Fire-and-forget delivery of location reports.

The classifier never waits on the network: :meth:`ReportDispatcher.submit`
schedules the send and returns immediately. Delivery order relative to
later fixes is not guaranteed and failed sends are only logged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from pybusride.models.report import BusLocationReport

_logger = logging.getLogger(__name__)


class LocationSink(Protocol):
    async def send_bus_location(self, report: BusLocationReport) -> None:
        ...


class ReportDispatcher:
    """Schedules report sends on the running event loop."""

    def __init__(self, sink: LocationSink) -> None:
        self._sink = sink
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, report: BusLocationReport) -> None:
        """Schedule *report* for delivery.

        Raises
        ------
        RuntimeError
            When called without a running event loop.
        """
        task = asyncio.get_running_loop().create_task(self._send(report))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, report: BusLocationReport) -> None:
        try:
            await self._sink.send_bus_location(report)
        except Exception:
            _logger.warning("Location report failed session=%s", report.session_id, exc_info=True)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight reports (up to *timeout* seconds)."""
        if not self._pending:
            return
        await asyncio.wait(set(self._pending), timeout=timeout)

    async def close(self) -> None:
        """Cancel reports still in flight."""
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
