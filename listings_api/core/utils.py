import math
from datetime import datetime, timezone
from typing import Callable

# Current-time provider, injectable so price adjustments are testable.
Clock = Callable[[], datetime]

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def rfc3339(moment: datetime) -> str:
    """Format as RFC 3339 in UTC, e.g. 2024-05-01T12:30:00Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

def parse_number(value) -> float | None:
    """
    Lenient numeric parse for upstream price fields:
    - numbers pass through
    - numeric strings are parsed (surrounding whitespace ignored)
    - anything else, NaN and infinities become None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None

def parse_int(value: str | None, default: int) -> int:
    """Integer query parameter, falling back to default when missing or malformed."""
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default

def parse_bind_address(host: str, default_host: str = "0.0.0.0") -> tuple[str, int]:
    """Split "host:port" (or ":port") into its parts."""
    name, sep, port = host.strip().rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid bind address {host!r}, expected host:port")
    return name or default_host, int(port)
