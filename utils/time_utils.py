import time
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Returns the current time in UTC, timezone aware."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Whole seconds since the epoch, as used in JWT iat/exp claims."""
    return int(time.time())
