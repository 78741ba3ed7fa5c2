"""UTC datetime utilities."""

from datetime import date, datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an API timestamp ('2024-05-01T10:00:00.000Z') into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch_ms(dt: datetime | None) -> int:
    """Millisecond timestamp used as the date sort key; None sorts as 0."""
    if dt is None:
        return 0
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def format_api_date(d: date | None) -> str | None:
    """Date filter format expected by the list endpoints: YYYY-MM-DD."""
    if d is None:
        return None
    return d.strftime("%Y-%m-%d")
