from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from matatu.core.config_env import settings


def utcnow() -> datetime:
    # naive UTC, the same convention as every DateTime column here
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def to_naive_utc(dt: datetime) -> datetime:
    """Timestamps without an offset are wall-clock time in settings.TIMEZONE."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=local_zone())
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
