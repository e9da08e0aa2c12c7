"""Ingestion layer.

Adapters that move data between the engine and the records backend: the
periodic peer feed (cluster corroboration input) and fire-and-forget
location reports.
"""

__all__: list[str] = []
