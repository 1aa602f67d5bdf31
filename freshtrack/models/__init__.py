"""SQLAlchemy models."""

from freshtrack.models.category import Category
from freshtrack.models.grocery_item import GroceryItem
from freshtrack.models.notification import Notification
from freshtrack.models.user import User

__all__ = [
    "User",
    "Category",
    "GroceryItem",
    "Notification",
]
