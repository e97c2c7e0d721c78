"""Ingestion layer.

Adapters that receive snapshots from the realtime store and hand them to
the state layer.
"""

__all__: list[str] = []
