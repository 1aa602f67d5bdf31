"""Expiry tracking schemas."""

from datetime import date

from pydantic import BaseModel

from freshtrack.models.enums import ExpiryStatus, Urgency
from freshtrack.schemas.grocery import GroceryItemResponse


class ExpiredItemResponse(GroceryItemResponse):
    """Expired item with how long ago it expired."""

    days_expired: int = 0


class ExpiringSoonResponse(BaseModel):
    """Items expiring within a window, earliest first."""

    days: int
    count: int
    items: list[GroceryItemResponse]


class ExpiredResponse(BaseModel):
    """Expired items, most recently expired first."""

    count: int
    items: list[ExpiredItemResponse]


class ExpiryCheckResponse(BaseModel):
    """Expiry status of a single item."""

    item: GroceryItemResponse
    status: ExpiryStatus
    days_remaining: int | None
    urgency: Urgency
    recommendation: str
    expiry_date: date | None


class ExpiryAlertCounts(BaseModel):
    """Dashboard alert counts."""

    critical: int
    warning: int
    attention: int


class ExpirySummaryResponse(BaseModel):
    """Bucket counts and alert lists for the caller's inventory."""

    counts: dict[ExpiryStatus, int]
    total_items: int
    tracked_items: int
    low_stock: int
    critical_percentage: int
    alerts: ExpiryAlertCounts
    expiring_soon: list[GroceryItemResponse]
    expired: list[ExpiredItemResponse]
