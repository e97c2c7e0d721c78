"""State layer.

The registry is the single source of truth for how collection snapshots
are merged; the detector turns per-device snapshots into change events.
"""
