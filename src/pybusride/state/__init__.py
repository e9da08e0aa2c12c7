"""Per-session ride state.

The position history, the explicit ride state machine and the session
record are owned by a single :class:`~pybusride.tracker.PassengerTracker`
and never shared between sessions.
"""
