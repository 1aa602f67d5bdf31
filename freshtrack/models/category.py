"""Category model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from freshtrack.database import Base
from freshtrack.models.mixins import TimestampMixin


class Category(Base, TimestampMixin):
    """Shared category for organizing grocery items."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(String(200), nullable=True)
    icon = Column(String(10), nullable=False, default="🛒")
    color = Column(String(7), nullable=False, default="#4CAF50")  # Hex color
    sort_order = Column(Integer, default=0)

    # Relationships
    items = relationship("GroceryItem", back_populates="category")
