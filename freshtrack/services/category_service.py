"""Category management."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freshtrack.models.category import Category
from freshtrack.models.grocery_item import GroceryItem

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Fruits", "icon": "🍎", "color": "#FF6B6B", "sort_order": 1},
    {"name": "Vegetables", "icon": "🥕", "color": "#4CAF50", "sort_order": 2},
    {"name": "Dairy", "icon": "🥛", "color": "#2196F3", "sort_order": 3},
    {"name": "Meat", "icon": "🍖", "color": "#F44336", "sort_order": 4},
    {"name": "Seafood", "icon": "🐟", "color": "#00BCD4", "sort_order": 5},
    {"name": "Bakery", "icon": "🍞", "color": "#FF9800", "sort_order": 6},
    {"name": "Beverages", "icon": "🥤", "color": "#9C27B0", "sort_order": 7},
    {"name": "Snacks", "icon": "🍿", "color": "#FFC107", "sort_order": 8},
    {"name": "Frozen", "icon": "❄️", "color": "#00BCD4", "sort_order": 9},
    {"name": "Canned", "icon": "🥫", "color": "#795548", "sort_order": 10},
    {"name": "Condiments", "icon": "🧂", "color": "#E91E63", "sort_order": 11},
    {"name": "Other", "icon": "📦", "color": "#9E9E9E", "sort_order": 12},
]


class DuplicateCategoryError(ValueError):
    """Raised when a category name is already taken."""


class CategoryInUseError(ValueError):
    """Raised when deleting a category that items still reference."""

    def __init__(self, category_id: int, item_count: int):
        self.category_id = category_id
        self.item_count = item_count
        super().__init__(f"Category {category_id} is used by {item_count} items")


class CategoryService:
    """Service for the shared category list."""

    def __init__(self, db: Session):
        self.db = db

    def item_counts(self, user_id: int) -> dict[int, int]:
        """Number of the user's items in each category."""
        rows = (
            self.db.query(GroceryItem.category_id, func.count(GroceryItem.id))
            .filter(GroceryItem.user_id == user_id)
            .group_by(GroceryItem.category_id)
            .all()
        )
        return {category_id: count for category_id, count in rows}

    def _commit(self, category: Category) -> Category:
        name = category.name
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateCategoryError(f"Category '{name}' already exists") from e
        self.db.refresh(category)
        return category

    def create(self, data: dict[str, Any]) -> Category:
        """Create a category, rejecting duplicate names."""
        category = Category(**data)
        self.db.add(category)
        category = self._commit(category)
        logger.info(f"Created category {category.id} ({category.name})")
        return category

    def update(self, category: Category, changes: dict[str, Any]) -> Category:
        """Apply a partial update, rejecting duplicate names."""
        for field, value in changes.items():
            setattr(category, field, value)
        return self._commit(category)

    def delete(self, category: Category) -> None:
        """Delete a category that no item references."""
        in_use = (
            self.db.query(func.count(GroceryItem.id))
            .filter(GroceryItem.category_id == category.id)
            .scalar()
        )
        if in_use:
            raise CategoryInUseError(category.id, in_use)

        self.db.delete(category)
        self.db.commit()
        logger.info(f"Deleted category {category.id}")

    def seed_defaults(self) -> int:
        """Create or refresh the default categories. Returns how many were created."""
        existing = {
            category.name: category
            for category in self.db.query(Category)
            .filter(Category.name.in_([c["name"] for c in DEFAULT_CATEGORIES]))
            .all()
        }

        created = 0
        for defaults in DEFAULT_CATEGORIES:
            category = existing.get(defaults["name"])
            if category is None:
                self.db.add(Category(**defaults))
                created += 1
            else:
                category.icon = defaults["icon"]
                category.color = defaults["color"]
                category.sort_order = defaults["sort_order"]

        self.db.commit()
        logger.info(f"Seeded {created} default categories")
        return created
