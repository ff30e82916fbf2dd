"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def format_time_remaining(end_time: datetime, now: datetime) -> str:
    """Countdown label for a market: '2d 3h', '4h 10m', '5m', or 'Ended'."""
    remaining = int((end_time - now).total_seconds())
    if remaining <= 0:
        return "Ended"
    days, rest = divmod(remaining, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes = rest // 60
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
