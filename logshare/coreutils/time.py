import time
from datetime import datetime, timedelta, timezone


def make_timestamp() -> int:
    """Current wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


def unix_minutes_ago(minutes: int, now: datetime | None = None) -> int:
    """UNIX timestamp (seconds) for `minutes` before now (UTC)."""
    now = now or datetime.now(tz=timezone.utc)
    return int((now - timedelta(minutes=minutes)).timestamp())


def dt_fromtimestamp(ts: int) -> str:
    """Convert UNIX timestamp to an ISO 8601 string (UTC)."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()
