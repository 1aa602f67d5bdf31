"""Turn classified items into notification drafts.

Drafts are not persisted here and are not deduplicated; that happens once,
in ``NotificationService.store_drafts``.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from freshtrack.models.enums import NotificationPriority, NotificationType
from freshtrack.services.expiry import (
    DEFAULT_POLICY,
    ExpiryPolicy,
    TrackedItem,
    classify_item,
    is_low_stock,
)


@dataclass
class NotificationDraft:
    """An unpersisted candidate notification."""

    user_id: int
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    related_item_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _format_quantity(quantity: float) -> str:
    return f"{quantity:g}"


def expiry_alert_text(name: str, days_remaining: int) -> tuple[str, str, NotificationPriority]:
    """Title, message and priority for an item expiring in ``days_remaining`` days."""
    if days_remaining == 0:
        return (
            "Expires Today!",
            f"{name} expires today. Use or discard it immediately.",
            NotificationPriority.URGENT,
        )
    if days_remaining == 1:
        return (
            "Expires Tomorrow",
            f"{name} expires tomorrow (in 1 day). Plan to use it soon.",
            NotificationPriority.HIGH,
        )
    return (
        "Expiring Soon",
        f"{name} expires in {days_remaining} days. Consider using it soon.",
        NotificationPriority.MEDIUM,
    )


def synthesize_expiry_alerts(
    items: Iterable[TrackedItem],
    today: date | datetime,
    policy: ExpiryPolicy = DEFAULT_POLICY,
    max_days: int | None = None,
) -> list[NotificationDraft]:
    """Draft one expiry alert per in-stock item expiring within the alert window.

    Items already past their expiry date are not drafted. ``max_days`` narrows
    the window (the hourly job passes 0 to only alert on items expiring today).
    Drafts come out ordered by days remaining, most urgent first.
    """
    window = policy.alert_window_days
    if max_days is not None:
        window = min(max_days, window)
    drafts: list[tuple[int, NotificationDraft]] = []

    for item in items:
        if item.quantity <= 0 or item.expiry_date is None:
            continue
        days_remaining = classify_item(item, today, policy).days_remaining
        if days_remaining is None or not 0 <= days_remaining <= window:
            continue

        title, message, priority = expiry_alert_text(item.name, days_remaining)
        drafts.append(
            (
                days_remaining,
                NotificationDraft(
                    user_id=item.user_id,
                    type=NotificationType.EXPIRY_ALERT,
                    title=title,
                    message=message,
                    priority=priority,
                    related_item_id=item.id,
                    metadata={
                        "item_name": item.name,
                        "expiry_date": item.expiry_date.isoformat(),
                        "days_remaining": days_remaining,
                    },
                ),
            )
        )

    drafts.sort(key=lambda pair: pair[0])
    return [draft for _, draft in drafts]


def synthesize_low_stock_alerts(
    items: Iterable[TrackedItem],
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> list[NotificationDraft]:
    """Draft one low-stock alert per in-stock item at or below its threshold."""
    drafts = []
    for item in items:
        if item.quantity <= 0:
            continue
        if not is_low_stock(item.quantity, item.low_stock_threshold, policy):
            continue
        unit = getattr(item, "unit", None) or ""
        left = f"{_format_quantity(item.quantity)} {unit}".strip()
        drafts.append(
            NotificationDraft(
                user_id=item.user_id,
                type=NotificationType.LOW_STOCK,
                title="Low Stock Alert",
                message=f"{item.name} is running low ({left} left). Consider restocking.",
                priority=NotificationPriority.MEDIUM,
                related_item_id=item.id,
                metadata={
                    "item_name": item.name,
                    "quantity": item.quantity,
                    "unit": unit or None,
                },
            )
        )
    return drafts
