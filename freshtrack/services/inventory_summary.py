"""Aggregation of one user's items into expiry and stock buckets."""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

from freshtrack.models.enums import ExpiryStatus
from freshtrack.services.expiry import (
    DEFAULT_POLICY,
    ExpiryClassification,
    ExpiryPolicy,
    TrackedItem,
    classify_item,
    is_low_stock,
)

SUMMARY_BUCKETS = (
    ExpiryStatus.EXPIRED,
    ExpiryStatus.EXPIRES_TODAY,
    ExpiryStatus.CRITICAL,
    ExpiryStatus.WARNING,
    ExpiryStatus.ATTENTION,
    ExpiryStatus.FRESH,
    ExpiryStatus.NO_EXPIRY,
)


@dataclass
class ClassifiedItem:
    """An item together with its classification."""

    item: TrackedItem
    classification: ExpiryClassification

    @property
    def status(self) -> ExpiryStatus:
        return self.classification.status

    @property
    def days_remaining(self) -> int | None:
        return self.classification.days_remaining


@dataclass
class InventorySummary:
    """Bucket counts and alert lists for one user's inventory."""

    counts: dict[ExpiryStatus, int]
    total_items: int
    tracked_items: int
    low_stock: int
    critical_percentage: int
    expiring_soon: list[ClassifiedItem] = field(default_factory=list)
    expired: list[ClassifiedItem] = field(default_factory=list)

    @property
    def alerts(self) -> dict[str, int]:
        """Counts grouped the way the dashboard shows them."""
        return {
            "critical": self.counts[ExpiryStatus.EXPIRED]
            + self.counts[ExpiryStatus.EXPIRES_TODAY]
            + self.counts[ExpiryStatus.CRITICAL],
            "warning": self.counts[ExpiryStatus.WARNING],
            "attention": self.counts[ExpiryStatus.ATTENTION],
        }


def _ensure_single_owner(items: Sequence[TrackedItem]) -> None:
    owners = {item.user_id for item in items}
    if len(owners) > 1:
        raise ValueError(f"Cannot aggregate items across owners: {sorted(owners)}")


def _percentage(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up, 0 for an empty whole."""
    if whole == 0:
        return 0
    return math.floor(100 * part / whole + 0.5)


def _classify_in_stock(
    items: Iterable[TrackedItem],
    today: date | datetime,
    policy: ExpiryPolicy,
) -> list[ClassifiedItem]:
    return [
        ClassifiedItem(item, classify_item(item, today, policy))
        for item in items
        if item.quantity > 0
    ]


def _expiring_soon(classified: Iterable[ClassifiedItem], days: int) -> list[ClassifiedItem]:
    soon = [
        entry
        for entry in classified
        if entry.days_remaining is not None and 0 <= entry.days_remaining <= days
    ]
    # Earliest expiry first
    return sorted(soon, key=lambda entry: entry.days_remaining)


def _expired(classified: Iterable[ClassifiedItem]) -> list[ClassifiedItem]:
    expired = [entry for entry in classified if entry.status == ExpiryStatus.EXPIRED]
    # Most recently expired first
    return sorted(expired, key=lambda entry: entry.days_remaining, reverse=True)


def expiring_soon(
    items: Sequence[TrackedItem],
    today: date | datetime,
    days: int | None = None,
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> list[ClassifiedItem]:
    """In-stock items expiring between today and ``days`` from now, earliest first."""
    _ensure_single_owner(items)
    horizon = policy.expiring_soon_days if days is None else days
    return _expiring_soon(_classify_in_stock(items, today, policy), horizon)


def expired_items(
    items: Sequence[TrackedItem],
    today: date | datetime,
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> list[ClassifiedItem]:
    """In-stock items past their expiry date, most recently expired first."""
    _ensure_single_owner(items)
    return _expired(_classify_in_stock(items, today, policy))


def low_stock_items(
    items: Sequence[TrackedItem],
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> list[TrackedItem]:
    """In-stock items at or below their threshold, lowest quantity first."""
    _ensure_single_owner(items)
    low = [
        item
        for item in items
        if item.quantity > 0 and is_low_stock(item.quantity, item.low_stock_threshold, policy)
    ]
    return sorted(low, key=lambda item: item.quantity)


def summarize(
    items: Sequence[TrackedItem],
    today: date | datetime,
    policy: ExpiryPolicy = DEFAULT_POLICY,
    expiring_within: int | None = None,
) -> InventorySummary:
    """Fold one user's items into bucket counts and sorted alert lists.

    Empty items (quantity 0) are left out of every count. The critical
    percentage is the share of the ``critical`` bucket among items that have
    an expiry date.
    """
    _ensure_single_owner(items)
    classified = _classify_in_stock(items, today, policy)

    counts = dict.fromkeys(SUMMARY_BUCKETS, 0)
    low_stock = 0
    for entry in classified:
        counts[entry.status] += 1
        if is_low_stock(entry.item.quantity, entry.item.low_stock_threshold, policy):
            low_stock += 1

    tracked = len(classified) - counts[ExpiryStatus.NO_EXPIRY]
    horizon = policy.expiring_soon_days if expiring_within is None else expiring_within

    return InventorySummary(
        counts=counts,
        total_items=len(classified),
        tracked_items=tracked,
        low_stock=low_stock,
        critical_percentage=_percentage(counts[ExpiryStatus.CRITICAL], tracked),
        expiring_soon=_expiring_soon(classified, horizon),
        expired=_expired(classified),
    )
