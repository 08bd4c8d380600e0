"""Time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_now_iso() -> str:
    """Second-precision UTC timestamp, e.g. ``2024-05-01T12:00:00Z``."""
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")
