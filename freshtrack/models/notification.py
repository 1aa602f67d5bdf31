"""Notification model."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from freshtrack.database import Base
from freshtrack.models.enums import NotificationPriority
from freshtrack.models.mixins import OwnedByUserMixin, TimestampMixin


class Notification(Base, OwnedByUserMixin, TimestampMixin):
    """A stored notification for a user."""

    __tablename__ = "notifications"
    __table_args__ = (
        # At most one notification per user for a given dedupe key
        UniqueConstraint("user_id", "dedupe_key", name="uq_notification_user_dedupe_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    message = Column(String(500), nullable=False)
    priority = Column(
        String(10), nullable=False, default=NotificationPriority.MEDIUM.value, index=True
    )
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    related_item_id = Column(
        Integer, ForeignKey("grocery_items.id", ondelete="SET NULL"), nullable=True
    )
    # {"item_name": ..., "expiry_date": ..., "days_remaining": ...} for expiry alerts
    payload = Column("metadata", JSON, nullable=True)
    dedupe_key = Column(String(255), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Relationships
    user = relationship("User", backref="notifications")
    related_item = relationship("GroceryItem", backref="notifications")
