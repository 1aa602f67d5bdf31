"""Grocery item mutations.

Every path that changes quantity, expiry date or status goes through
``GroceryService`` so the derived status is recomputed explicitly.
"""

import logging
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy.orm import Session

from freshtrack.config import get_settings
from freshtrack.models.category import Category
from freshtrack.models.enums import ItemStatus
from freshtrack.models.grocery_item import GroceryItem
from freshtrack.services.expiry import ExpiryPolicy, derive_status, local_today

logger = logging.getLogger(__name__)


class InsufficientQuantityError(ValueError):
    """Raised when consuming more than an item holds."""

    def __init__(self, requested: float, available: float):
        self.requested = requested
        self.available = available
        super().__init__(f"Cannot consume {requested:g}, only {available:g} available")


class InvalidCategoryError(ValueError):
    """Raised when an item references a category that doesn't exist."""


class GroceryService:
    """Service for creating and mutating grocery items."""

    def __init__(self, db: Session, policy: ExpiryPolicy | None = None):
        self.db = db
        self.settings = get_settings()
        self.policy = policy or ExpiryPolicy.from_settings(self.settings)

    def today(self) -> date:
        """Today in the configured time zone."""
        return local_today(self.settings.timezone)

    @staticmethod
    def apply_derived_state(
        item: GroceryItem, today: date, reopen: bool = False
    ) -> GroceryItem:
        """Recompute the item's status from its quantity and expiry date.

        With ``reopen`` the item is treated as active first, so a consumed or
        expired item whose quantity or date changed gets its status re-derived
        instead of keeping a terminal status that no longer fits.
        """
        previous = item.status or ItemStatus.ACTIVE.value
        status = derive_status(
            ItemStatus.ACTIVE if reopen else previous, item.quantity, item.expiry_date, today
        )
        if status == ItemStatus.CONSUMED:
            if previous != ItemStatus.CONSUMED.value:
                item.consumed_at = datetime.now(UTC)
        else:
            item.consumed_at = None
        item.status = status.value
        return item

    def _require_category(self, category_id: int) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise InvalidCategoryError(f"Category {category_id} does not exist")
        return category

    def create_item(self, user_id: int, data: dict[str, Any]) -> GroceryItem:
        """Create an item for a user."""
        self._require_category(data["category_id"])

        item = GroceryItem(user_id=user_id, **data)
        if item.low_stock_threshold is None:
            item.low_stock_threshold = self.policy.default_low_stock_threshold
        item.status = ItemStatus.ACTIVE.value
        if item.purchase_date is None:
            item.purchase_date = self.today()
        self.apply_derived_state(item, self.today())

        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Created grocery item {item.id} for user {user_id}")
        return item

    def update_item(self, item: GroceryItem, changes: dict[str, Any]) -> GroceryItem:
        """Apply a partial update and recompute the status.

        The only status a caller can set is ``wasted``, or ``active`` to undo
        it. Everything else is derived from the updated quantity and expiry
        date, so a consumed item that gets stock back becomes active again.
        """
        changes = dict(changes)
        requested = changes.pop("status", None)
        category_id = changes.get("category_id")
        if category_id is not None and category_id != item.category_id:
            self._require_category(category_id)

        for field, value in changes.items():
            setattr(item, field, value)

        if requested == ItemStatus.WASTED:
            item.status = ItemStatus.WASTED.value
            item.consumed_at = None
        else:
            reopen = requested == ItemStatus.ACTIVE or item.status != ItemStatus.WASTED.value
            self.apply_derived_state(item, self.today(), reopen=reopen)

        self.db.commit()
        self.db.refresh(item)
        return item

    def consume(self, item: GroceryItem, amount: float) -> GroceryItem:
        """Use up part of an item. Never goes below zero."""
        if amount > item.quantity:
            raise InsufficientQuantityError(amount, item.quantity)

        item.quantity = item.quantity - amount
        self.apply_derived_state(item, self.today())

        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Consumed {amount:g} of item {item.id}, {item.quantity:g} left")
        return item

    def restock(self, item: GroceryItem, amount: float) -> GroceryItem:
        """Add to an item's quantity, reactivating it if it had been used up."""
        item.quantity = item.quantity + amount
        self.apply_derived_state(
            item, self.today(), reopen=item.status == ItemStatus.CONSUMED.value
        )

        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Restocked item {item.id} by {amount:g}, now {item.quantity:g}")
        return item

    def find_by_barcode(self, user_id: int, code: str) -> GroceryItem | None:
        """A user's item with exactly this barcode, newest first if there are several."""
        return (
            self.db.query(GroceryItem)
            .filter(GroceryItem.user_id == user_id, GroceryItem.barcode == code.strip())
            .order_by(GroceryItem.created_at.desc(), GroceryItem.id.desc())
            .first()
        )

    def delete_items(self, user_id: int, item_ids: list[int]) -> int:
        """Delete the listed items that belong to the user. Other ids are ignored."""
        items = (
            self.db.query(GroceryItem)
            .filter(GroceryItem.user_id == user_id, GroceryItem.id.in_(sorted(set(item_ids))))
            .all()
        )
        for item in items:
            self.db.delete(item)
        self.db.commit()
        logger.info(f"Deleted {len(items)} grocery items for user {user_id}")
        return len(items)

    def mark_expired_items(self, today: date | None = None) -> int:
        """Move every active, in-stock item past its expiry date to ``expired``."""
        today = today or self.today()
        candidates = (
            self.db.query(GroceryItem)
            .filter(
                GroceryItem.status == ItemStatus.ACTIVE.value,
                GroceryItem.expiry_date.isnot(None),
                GroceryItem.expiry_date < today,
            )
            .all()
        )

        marked = 0
        for item in candidates:
            self.apply_derived_state(item, today)
            if item.status == ItemStatus.EXPIRED.value:
                marked += 1

        self.db.commit()
        logger.info(f"Marked {marked} items as expired")
        return marked
