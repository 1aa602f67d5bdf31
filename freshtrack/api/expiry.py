"""Expiry tracking API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from freshtrack.api.dependencies import get_current_user, get_expiry_service, get_user_item
from freshtrack.database import get_db
from freshtrack.models.user import User
from freshtrack.schemas.expiry import (
    ExpiredItemResponse,
    ExpiredResponse,
    ExpiringSoonResponse,
    ExpiryAlertCounts,
    ExpiryCheckResponse,
    ExpirySummaryResponse,
)
from freshtrack.schemas.grocery import GroceryItemResponse
from freshtrack.schemas.notification import ExpiryNotifyResponse, NotificationResponse
from freshtrack.services.expiry_service import ExpiryService
from freshtrack.services.inventory_summary import ClassifiedItem

router = APIRouter(prefix="/api/v1/expiry", tags=["expiry"])


def _soon(entries: list[ClassifiedItem], service: ExpiryService) -> list[GroceryItemResponse]:
    today = service.today()
    return [GroceryItemResponse.from_item(entry.item, today, service.policy) for entry in entries]


def _expired(entries: list[ClassifiedItem], service: ExpiryService) -> list[ExpiredItemResponse]:
    today = service.today()
    responses = []
    for entry in entries:
        response = ExpiredItemResponse.from_item(entry.item, today, service.policy)
        response.days_expired = -entry.days_remaining
        responses.append(response)
    return responses


@router.get("/expiring-soon", response_model=ExpiringSoonResponse)
def get_expiring_soon(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ExpiryService, Depends(get_expiry_service)],
    days: Annotated[int | None, Query(ge=0, le=365)] = None,
):
    """In-stock items expiring within ``days`` (default from settings), earliest first."""
    horizon = service.policy.expiring_soon_days if days is None else days
    entries = service.expiring_soon(current_user.id, horizon)
    return ExpiringSoonResponse(days=horizon, count=len(entries), items=_soon(entries, service))


@router.get("/expired", response_model=ExpiredResponse)
def get_expired(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ExpiryService, Depends(get_expiry_service)],
):
    """In-stock items past their expiry date, most recently expired first."""
    entries = service.expired(current_user.id)
    return ExpiredResponse(count=len(entries), items=_expired(entries, service))


@router.get("/check/{item_id}", response_model=ExpiryCheckResponse)
def check_item(
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    service: Annotated[ExpiryService, Depends(get_expiry_service)],
):
    """Expiry status of one item with a recommendation."""
    item = get_user_item(db, item_id, current_user)
    today = service.today()
    classification, recommendation = service.check_item(item, today)
    return ExpiryCheckResponse(
        item=GroceryItemResponse.from_item(item, today, service.policy),
        status=classification.status,
        days_remaining=classification.days_remaining,
        urgency=classification.urgency,
        recommendation=recommendation,
        expiry_date=item.expiry_date,
    )


@router.get("/summary", response_model=ExpirySummaryResponse)
def get_summary(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ExpiryService, Depends(get_expiry_service)],
):
    """Bucket counts, low-stock count and alert lists for the caller's inventory."""
    summary = service.summary(current_user.id)
    return ExpirySummaryResponse(
        counts=summary.counts,
        total_items=summary.total_items,
        tracked_items=summary.tracked_items,
        low_stock=summary.low_stock,
        critical_percentage=summary.critical_percentage,
        alerts=ExpiryAlertCounts(**summary.alerts),
        expiring_soon=_soon(summary.expiring_soon, service),
        expired=_expired(summary.expired, service),
    )


@router.post("/notify", response_model=ExpiryNotifyResponse)
def send_notifications(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ExpiryService, Depends(get_expiry_service)],
    include_low_stock: bool = False,
):
    """Create expiry alerts for the caller. Alerts already sent today are skipped."""
    created = service.send_expiry_notifications(
        current_user.id, include_low_stock=include_low_stock
    )
    return ExpiryNotifyResponse(
        count=len(created),
        items=[NotificationResponse.model_validate(n) for n in created],
    )
