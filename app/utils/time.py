from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_after(delta: timedelta) -> datetime:
    """UTC instant `delta` from now, used for token and session expiry."""
    return utc_now() + delta
