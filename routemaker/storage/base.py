from datetime import UTC, datetime

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    """Current UTC time as a timezone-naive datetime.

    Timestamp columns are stored without a timezone, so every comparison
    against them must use naive UTC values.
    """
    return datetime.now(UTC).replace(tzinfo=None)
