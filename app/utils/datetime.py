from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def iso_utc(dt: Optional[datetime] = None, *, timespec: str = "seconds") -> str:
    """ISO-8601 in UTC with a ``Z`` suffix; naive datetimes are read as UTC."""
    dt = dt or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec=timespec).replace("+00:00", "Z")
