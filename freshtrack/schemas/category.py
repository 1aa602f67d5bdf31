"""Category schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class CategoryCreate(BaseModel):
    """Create a new category."""

    name: str = Field(..., min_length=2, max_length=50)
    description: str | None = Field(None, max_length=200)
    icon: str = Field("🛒", max_length=10)
    color: str = Field("#4CAF50", pattern=HEX_COLOR_PATTERN)
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    """Update a category."""

    name: str | None = Field(None, min_length=2, max_length=50)
    description: str | None = Field(None, max_length=200)
    icon: str | None = Field(None, max_length=10)
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    sort_order: int | None = None


class CategoryResponse(BaseModel):
    """Category response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    icon: str
    color: str
    sort_order: int
    created_at: datetime
    updated_at: datetime


class CategoryWithCountResponse(CategoryResponse):
    """Category with the number of the caller's items in it."""

    item_count: int = 0


class CategoryRef(BaseModel):
    """Category summary embedded in item responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    icon: str
    color: str
