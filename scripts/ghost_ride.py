#!/usr/bin/env python3
"""Replay the simulated Route 138 trip through the ride classifier.

Prints one line per processed fix. Runs offline by default; when
``BUSRIDE_API_KEY`` (and ``BUSRIDE_BASE_URL``) are set, confirmed fast
samples are also reported to the backend and peers are polled.

Examples:
    python scripts/ghost_ride.py --interval 0 --seed 7
    python scripts/ghost_ride.py --interval 1 --online
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pybusride import (  # noqa: E402
    BusRideClient,
    BusRideConfig,
    PassengerTracker,
    TrackerUpdate,
    ghost_ride_path,
    replay,
)


def _format(update: TrackerUpdate) -> str:
    flag = "BUS" if update.ride_flag else "---"
    sent = " sent" if update.report_submitted else ""
    return (
        f"[{flag}] {update.status:<34} {update.current_speed_kmh:>3} km/h "
        f"conf={update.confidence:.1f} next={update.next_halt}{sent}"
    )


async def _run_offline(args: argparse.Namespace, config: BusRideConfig) -> None:
    tracker = PassengerTracker(config=config.detection)
    path = ghost_ride_path(args.seed)
    async for point in replay(path, interval=args.interval, restamp=args.interval > 0):
        print(_format(tracker.process(point)))


async def _run_online(args: argparse.Namespace, config: BusRideConfig) -> None:
    path = ghost_ride_path(args.seed)
    async with BusRideClient(config) as client, client.ride() as tracker:
        print(f"session={tracker.session_id}")
        async for point in replay(path, interval=args.interval, restamp=args.interval > 0):
            print(_format(tracker.process(point)))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay the ghost ride through the classifier")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the halt jitter")
    parser.add_argument("--interval", type=float, default=0.0, help="Seconds between fixes (0 = as fast as possible)")
    parser.add_argument("--online", action="store_true", help="Report to and poll the configured backend")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = BusRideConfig.from_env()
    runner = _run_online if args.online else _run_offline
    try:
        asyncio.run(runner(args, config))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
