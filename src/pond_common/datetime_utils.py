"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def now_ts() -> int:
    """Return whole seconds since the Unix epoch."""
    return int(utc_now().timestamp())


def ts_to_iso(ts: int) -> str:
    """Render an epoch-seconds timestamp as an ISO-8601 UTC string."""
    return datetime.fromtimestamp(ts, timezone.utc).isoformat()


def format_time_remaining(seconds: int) -> str:
    """'1d 2h 3m' style countdown; 'Ended' when nothing remains."""
    if seconds <= 0:
        return "Ended"
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)
