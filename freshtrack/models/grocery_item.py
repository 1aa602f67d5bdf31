"""Grocery item model."""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from freshtrack.database import Base
from freshtrack.models.enums import ItemStatus
from freshtrack.models.mixins import OwnedByUserMixin, TimestampMixin


class GroceryItem(Base, OwnedByUserMixin, TimestampMixin):
    """A tracked grocery item owned by one user."""

    __tablename__ = "grocery_items"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    quantity = Column(Float, nullable=False, default=1)
    unit = Column(String(20), nullable=False, default="pcs")
    low_stock_threshold = Column(Float, nullable=True, default=5)
    price = Column(Float, nullable=False, default=0)

    purchase_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True, index=True)
    location = Column(String(20), nullable=False, default="pantry")
    barcode = Column(String(64), nullable=True, index=True)
    brand = Column(String(50), nullable=True)
    notes = Column(String(500), nullable=True)

    # Derived from quantity and expiry_date on every mutation
    status = Column(String(20), nullable=False, default=ItemStatus.ACTIVE.value, index=True)
    consumed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", backref="grocery_items")
    category = relationship("Category", back_populates="items")

    @property
    def total_value(self) -> float:
        """Quantity times unit price."""
        return (self.quantity or 0) * (self.price or 0)
