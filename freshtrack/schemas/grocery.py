"""Grocery item schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from freshtrack.models.enums import ExpiryStatus, ItemStatus, StorageLocation, Unit, Urgency
from freshtrack.schemas.category import CategoryRef
from freshtrack.services.expiry import ExpiryPolicy, classify_item, is_low_stock


def _coerce_day(value: Any) -> Any:
    """Accept full ISO datetimes for date fields by dropping the time of day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise ValueError(f"Invalid date: {value}") from e
    return value


class GroceryItemCreate(BaseModel):
    """Create a grocery item."""

    model_config = ConfigDict(
        str_strip_whitespace=True, use_enum_values=True, validate_default=True
    )

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    category_id: int
    quantity: float = Field(1, ge=0)
    unit: Unit = Unit.PIECES
    low_stock_threshold: float | None = Field(None, ge=0)
    price: float = Field(0, ge=0)
    purchase_date: date | None = None
    expiry_date: date | None = None
    location: StorageLocation = StorageLocation.PANTRY
    barcode: str | None = Field(None, max_length=64)
    brand: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=500)

    @field_validator("purchase_date", "expiry_date", mode="before")
    @classmethod
    def coerce_dates(cls, value: Any) -> Any:
        return _coerce_day(value)


class GroceryItemUpdate(BaseModel):
    """Update a grocery item. Only provided fields change."""

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    category_id: int | None = None
    quantity: float | None = Field(None, ge=0)
    unit: Unit | None = None
    low_stock_threshold: float | None = Field(None, ge=0)
    price: float | None = Field(None, ge=0)
    purchase_date: date | None = None
    expiry_date: date | None = None
    location: StorageLocation | None = None
    barcode: str | None = Field(None, max_length=64)
    brand: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=500)
    status: ItemStatus | None = None

    @field_validator("purchase_date", "expiry_date", mode="before")
    @classmethod
    def coerce_dates(cls, value: Any) -> Any:
        return _coerce_day(value)

    @field_validator("status")
    @classmethod
    def only_user_settable_status(cls, value: Any) -> Any:
        """Consumed and expired follow from quantity and expiry date."""
        if value is not None and value not in (ItemStatus.ACTIVE, ItemStatus.WASTED):
            raise ValueError("status can only be set to active or wasted")
        return value

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "GroceryItemUpdate":
        """Required columns may be omitted but not cleared."""
        for field in ("name", "category_id", "quantity", "unit", "price", "location", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class QuantityChange(BaseModel):
    """Amount to consume or restock."""

    amount: float = Field(..., gt=0)


class BulkDeleteRequest(BaseModel):
    """Ids of items to delete."""

    ids: list[int] = Field(..., min_length=1, max_length=500)


class BulkDeleteResponse(BaseModel):
    """How many items a bulk delete removed."""

    deleted_count: int
    message: str


class GroceryItemResponse(BaseModel):
    """Grocery item with its derived expiry and stock state."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category_id: int
    category: CategoryRef | None = None
    name: str
    description: str | None
    quantity: float
    unit: str
    low_stock_threshold: float | None
    price: float
    total_value: float
    purchase_date: date | None
    expiry_date: date | None
    location: str
    barcode: str | None
    brand: str | None
    notes: str | None
    status: str
    consumed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    expiry_status: ExpiryStatus | None = None
    days_until_expiry: int | None = None
    urgency: Urgency | None = None
    is_low_stock: bool = False

    @classmethod
    def from_item(cls, item: Any, today: date, policy: ExpiryPolicy) -> "GroceryItemResponse":
        """Build a response, classifying the item as of ``today``."""
        classification = classify_item(item, today, policy)
        response = cls.model_validate(item)
        response.expiry_status = classification.status
        response.days_until_expiry = (
            None if item.expiry_date is None else classification.days_remaining
        )
        response.urgency = classification.urgency
        response.is_low_stock = is_low_stock(item.quantity, item.low_stock_threshold, policy)
        return response


class Pagination(BaseModel):
    """Pagination metadata."""

    page: int
    limit: int
    total: int
    pages: int


class GroceryListResponse(BaseModel):
    """A page of grocery items."""

    items: list[GroceryItemResponse]
    pagination: Pagination


class StatusStat(BaseModel):
    """Count and value of items in one status."""

    status: str
    count: int
    total_value: float


class CategoryStat(BaseModel):
    """Count of items in one category."""

    category_id: int
    name: str
    count: int


class GroceryStatsResponse(BaseModel):
    """Inventory statistics by status and by category."""

    status_stats: list[StatusStat]
    category_stats: list[CategoryStat]
