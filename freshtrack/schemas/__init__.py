"""Pydantic schemas for API requests and responses."""

from freshtrack.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from freshtrack.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from freshtrack.schemas.grocery import (
    GroceryItemCreate,
    GroceryItemResponse,
    GroceryItemUpdate,
    QuantityChange,
)
from freshtrack.schemas.notification import NotificationCreate, NotificationResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "GroceryItemCreate",
    "GroceryItemUpdate",
    "GroceryItemResponse",
    "QuantityChange",
    "NotificationCreate",
    "NotificationResponse",
]
