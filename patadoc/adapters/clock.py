from datetime import UTC, datetime


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)


def isoformat_z(dt: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix (UTC)."""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
