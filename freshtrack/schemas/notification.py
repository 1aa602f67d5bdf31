"""Notification schemas."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from freshtrack.models.enums import NotificationPriority, NotificationType


class NotificationCreate(BaseModel):
    """Create a custom notification."""

    type: NotificationType = NotificationType.GENERAL
    title: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=500)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    related_item_id: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class NotificationResponse(BaseModel):
    """Notification response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str
    title: str
    message: str
    priority: str
    is_read: bool
    read_at: datetime | None
    related_item_id: int | None
    metadata: dict[str, Any] | None = Field(
        None, validation_alias=AliasChoices("payload", "metadata")
    )
    expires_at: datetime | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    """A page of notifications, newest first."""

    count: int
    total: int
    page: int
    pages: int
    items: list[NotificationResponse]


class UnreadCountResponse(BaseModel):
    """Number of unread notifications."""

    count: int


class BulkNotificationResult(BaseModel):
    """Result of a bulk notification operation."""

    count: int
    message: str


class ExpiryNotifyResponse(BaseModel):
    """Notifications created by an expiry check."""

    count: int
    items: list[NotificationResponse]
