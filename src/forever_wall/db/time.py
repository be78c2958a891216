"""UTC timestamp helpers shared by models and serializers."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive timestamp read back from the database.

    SQLite drops tzinfo on storage; every stored value was written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
