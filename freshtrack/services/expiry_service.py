"""Expiry tracking service.

Loads a user's item snapshot, runs the classifiers over it and hands
notification drafts to the notification store.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from freshtrack.config import get_settings
from freshtrack.models.enums import ExpiryStatus, ItemStatus
from freshtrack.models.grocery_item import GroceryItem
from freshtrack.models.notification import Notification
from freshtrack.models.user import User
from freshtrack.services.expiry import (
    ExpiryClassification,
    ExpiryPolicy,
    classify_item,
    local_today,
)
from freshtrack.services.expiry_alerts import (
    synthesize_expiry_alerts,
    synthesize_low_stock_alerts,
)
from freshtrack.services.inventory_summary import (
    ClassifiedItem,
    InventorySummary,
    expired_items,
    expiring_soon,
    low_stock_items,
    summarize,
)
from freshtrack.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

RECOMMENDATIONS: dict[ExpiryStatus, str] = {
    ExpiryStatus.EXPIRED: "Discard this item immediately for safety",
    ExpiryStatus.EXPIRES_TODAY: "Use this item today or discard",
    ExpiryStatus.CRITICAL: "Use immediately to avoid waste",
    ExpiryStatus.WARNING: "Plan to use within next few days",
    ExpiryStatus.ATTENTION: "Keep an eye on this item",
    ExpiryStatus.FRESH: "Item is fresh",
    ExpiryStatus.NO_EXPIRY: "No expiry date is tracked for this item",
    ExpiryStatus.CONSUMED: "Item is used up",
}

# Statuses whose items still sit in the kitchen
IN_STOCK_STATUSES = (ItemStatus.ACTIVE.value, ItemStatus.EXPIRED.value)


class ExpiryService:
    """Service for expiry summaries, lists and alerts for one user at a time."""

    def __init__(self, db: Session, policy: ExpiryPolicy | None = None):
        self.db = db
        self.settings = get_settings()
        self.policy = policy or ExpiryPolicy.from_settings(self.settings)

    def today(self) -> date:
        """Today in the configured time zone."""
        return local_today(self.settings.timezone)

    def snapshot(self, user_id: int) -> list[GroceryItem]:
        """A user's items that are still in stock."""
        return (
            self.db.query(GroceryItem)
            .filter(
                GroceryItem.user_id == user_id,
                GroceryItem.status.in_(IN_STOCK_STATUSES),
                GroceryItem.quantity > 0,
            )
            .order_by(GroceryItem.id)
            .all()
        )

    def summary(
        self,
        user_id: int,
        today: date | None = None,
        expiring_within: int | None = None,
    ) -> InventorySummary:
        """Bucket counts and alert lists for a user."""
        return summarize(
            self.snapshot(user_id),
            today or self.today(),
            self.policy,
            expiring_within=expiring_within,
        )

    def expiring_soon(
        self,
        user_id: int,
        days: int | None = None,
        today: date | None = None,
    ) -> list[ClassifiedItem]:
        """Items expiring within ``days``, earliest first."""
        return expiring_soon(self.snapshot(user_id), today or self.today(), days, self.policy)

    def expired(self, user_id: int, today: date | None = None) -> list[ClassifiedItem]:
        """Expired items still in stock, most recently expired first."""
        return expired_items(self.snapshot(user_id), today or self.today(), self.policy)

    def low_stock(self, user_id: int) -> list[GroceryItem]:
        """In-stock items at or below their low-stock threshold.

        Same item set the summary's ``low_stock`` count is taken over.
        """
        return low_stock_items(self.snapshot(user_id), self.policy)

    def check_item(
        self, item: GroceryItem, today: date | None = None
    ) -> tuple[ExpiryClassification, str]:
        """Classification of a single item plus a recommendation."""
        classification = classify_item(item, today or self.today(), self.policy)
        return classification, RECOMMENDATIONS[classification.status]

    def send_expiry_notifications(
        self,
        user_id: int,
        today: date | None = None,
        max_days: int | None = None,
        include_low_stock: bool = False,
    ) -> list[Notification]:
        """Synthesize alerts for a user and store the ones not sent yet today."""
        today = today or self.today()
        items = self.snapshot(user_id)

        drafts = synthesize_expiry_alerts(items, today, self.policy, max_days=max_days)
        if include_low_stock:
            drafts.extend(synthesize_low_stock_alerts(items, self.policy))

        if not drafts:
            return []
        return NotificationService(self.db, self.policy).store_drafts(user_id, drafts, today)

    def check_all_users(
        self,
        today: date | None = None,
        max_days: int | None = None,
        include_low_stock: bool = True,
    ) -> int:
        """Run the alert check for every active user who wants notifications."""
        today = today or self.today()
        users = (
            self.db.query(User)
            .filter(User.is_active.is_(True), User.notifications_enabled.is_(True))
            .all()
        )

        total = 0
        for user in users:
            created = self.send_expiry_notifications(
                user.id, today, max_days=max_days, include_low_stock=include_low_stock
            )
            total += len(created)

        logger.info(f"Expiry check complete for {len(users)} users, {total} alerts stored")
        return total
