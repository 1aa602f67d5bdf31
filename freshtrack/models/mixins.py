"""Mixins for SQLAlchemy models."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import declared_attr


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class OwnedByUserMixin:
    """Rows that belong to exactly one user.

    Every per-user query filters on ``user_id``; aggregation never mixes owners.
    """

    @declared_attr
    def user_id(cls):  # noqa: N805
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
