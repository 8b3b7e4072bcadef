from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    # Python-side defaults so the values are populated after flush without
    # an extra round trip on the async session.
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


class AuditMixin:
    """Actors are platform customer GIDs, not local user rows."""

    created_by = Column(String(255), nullable=False, index=True)
    updated_by = Column(String(255), nullable=True)
