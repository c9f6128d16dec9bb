from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the backend's datetime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value):
    """Accept a datetime or an ISO-8601 string (``Z`` suffix allowed); return naive UTC."""
    if value is None or isinstance(value, datetime):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
