"""Notification API endpoints."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from freshtrack.api.dependencies import (
    get_current_user,
    get_notification_service,
    get_user_item,
)
from freshtrack.database import get_db
from freshtrack.models.enums import NotificationType
from freshtrack.models.notification import Notification
from freshtrack.models.user import User
from freshtrack.schemas.notification import (
    BulkNotificationResult,
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from freshtrack.services.expiry_alerts import NotificationDraft
from freshtrack.services.notification_service import NotificationService

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


def get_user_notification(db: Session, notification_id: int, user: User) -> Notification:
    """Get a notification that belongs to the user."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    read: bool | None = None,
    notification_type: Annotated[NotificationType | None, Query(alias="type")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """List the caller's notifications, newest first."""
    query = db.query(Notification).filter(Notification.user_id == current_user.id)
    if read is not None:
        query = query.filter(Notification.is_read.is_(read))
    if notification_type is not None:
        query = query.filter(Notification.type == notification_type.value)

    total = query.count()
    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return NotificationListResponse(
        count=len(notifications),
        total=total,
        page=page,
        pages=math.ceil(total / limit) if total else 0,
        items=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.get("/type/{notification_type}", response_model=NotificationListResponse)
def list_notifications_by_type(
    notification_type: NotificationType,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """The caller's notifications of one type, newest first."""
    return list_notifications(
        current_user, db, notification_type=notification_type, page=page, limit=limit
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Number of unread notifications."""
    count = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .count()
    )
    return UnreadCountResponse(count=count)


@router.patch("/read-all", response_model=BulkNotificationResult)
def mark_all_read(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Mark every unread notification as read."""
    count = service.mark_all_read(current_user.id)
    return BulkNotificationResult(count=count, message=f"{count} notifications marked as read")


@router.delete("", response_model=BulkNotificationResult)
def clear_notifications(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Delete all of the caller's notifications."""
    count = service.clear(current_user.id)
    return BulkNotificationResult(count=count, message=f"{count} notifications deleted")


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification(
    data: NotificationCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Create a custom notification for the caller."""
    if data.related_item_id is not None:
        get_user_item(db, data.related_item_id, current_user)

    draft = NotificationDraft(
        user_id=current_user.id,
        type=data.type,
        title=data.title,
        message=data.message,
        priority=data.priority,
        related_item_id=data.related_item_id,
        metadata=data.metadata,
    )
    return NotificationResponse.model_validate(service.create(draft))


@router.get("/{notification_id}", response_model=NotificationResponse)
def get_notification(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single notification."""
    return NotificationResponse.model_validate(
        get_user_notification(db, notification_id, current_user)
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Mark a notification as read."""
    notification = get_user_notification(db, notification_id, current_user)
    return NotificationResponse.model_validate(service.mark_read(notification))


@router.patch("/{notification_id}/unread", response_model=NotificationResponse)
def mark_unread(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Mark a notification as unread."""
    notification = get_user_notification(db, notification_id, current_user)
    return NotificationResponse.model_validate(service.mark_unread(notification))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Delete a notification."""
    service.delete(get_user_notification(db, notification_id, current_user))
