"""
Timestamp and identifier utilities for consistent time handling across the system.
"""

import threading
import time
from datetime import datetime, timezone
from typing import Optional

_id_lock = threading.Lock()
_last_id = 0


def now_iso(timestamp: Optional[float] = None) -> str:
    """Convert timestamp to an ISO-8601 UTC string with millisecond precision.

    Args:
        timestamp: Unix timestamp in seconds (optional, uses current time if None)

    Returns:
        ISO timestamp such as 2024-05-01T08:30:00.123Z
    """
    if timestamp is None:
        timestamp = time.time()
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def generate_id() -> str:
    """Generate a creation-time identifier.

    Identifiers are milliseconds since the epoch, bumped forward when two are
    requested within the same millisecond, so they are unique and increasing
    for the lifetime of the process.

    Returns:
        Identifier as a decimal string
    """
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)
