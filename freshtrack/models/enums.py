"""Enums for model fields and expiry classification."""

from enum import Enum


class ItemStatus(str, Enum):
    """Lifecycle status of a grocery item."""

    ACTIVE = "active"
    CONSUMED = "consumed"
    EXPIRED = "expired"
    WASTED = "wasted"

    def is_terminal(self) -> bool:
        """Check if the expiry engine will never move the item out of this status."""
        return self != ItemStatus.ACTIVE


class ExpiryStatus(str, Enum):
    """Expiry bucket an in-stock item falls into."""

    EXPIRED = "expired"
    EXPIRES_TODAY = "expires_today"
    CRITICAL = "critical"
    WARNING = "warning"
    ATTENTION = "attention"
    FRESH = "fresh"
    NO_EXPIRY = "no_expiry"
    CONSUMED = "consumed"


class Urgency(str, Enum):
    """Coarse grouping over expiry statuses, drives alert priority."""

    NONE = "none"
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class NotificationType(str, Enum):
    """Kinds of notifications a user can receive."""

    EXPIRY_ALERT = "expiry_alert"
    LOW_STOCK = "low_stock"
    PRICE_ALERT = "price_alert"
    GENERAL = "general"
    SYSTEM = "system"
    REMINDER = "reminder"


class NotificationPriority(str, Enum):
    """Notification priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Unit(str, Enum):
    """Display units for quantities. Classification ignores them."""

    KG = "kg"
    GRAM = "g"
    LITER = "l"
    MILLILITER = "ml"
    PIECES = "pcs"
    DOZEN = "dozen"
    PACK = "pack"
    BOTTLE = "bottle"
    CAN = "can"
    BOX = "box"


class StorageLocation(str, Enum):
    """Where an item is kept."""

    FRIDGE = "fridge"
    FREEZER = "freezer"
    PANTRY = "pantry"
    CABINET = "cabinet"
    COUNTER = "counter"
    OTHER = "other"
