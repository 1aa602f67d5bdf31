"""Tests for notification draft synthesis."""

from datetime import date, timedelta
from types import SimpleNamespace

from freshtrack.models.enums import NotificationPriority, NotificationType
from freshtrack.services.expiry import ExpiryPolicy
from freshtrack.services.expiry_alerts import (
    expiry_alert_text,
    synthesize_expiry_alerts,
    synthesize_low_stock_alerts,
)

TODAY = date(2024, 3, 15)


def make_item(item_id=1, name="Milk", quantity=1, days=None, threshold=5, unit="l"):
    return SimpleNamespace(
        id=item_id,
        user_id=7,
        name=name,
        quantity=quantity,
        unit=unit,
        low_stock_threshold=threshold,
        expiry_date=None if days is None else TODAY + timedelta(days=days),
    )


def test_item_expiring_tomorrow_gets_high_priority_draft():
    drafts = synthesize_expiry_alerts([make_item(days=1)], TODAY)

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.priority == NotificationPriority.HIGH
    assert "tomorrow" in draft.title.lower()
    assert "Milk" in draft.message
    assert draft.type == NotificationType.EXPIRY_ALERT
    assert draft.related_item_id == 1
    assert draft.user_id == 7


def test_draft_metadata():
    draft = synthesize_expiry_alerts([make_item(days=2)], TODAY)[0]
    assert draft.metadata == {
        "item_name": "Milk",
        "expiry_date": "2024-03-17",
        "days_remaining": 2,
    }


def test_priority_by_days_remaining():
    assert expiry_alert_text("Eggs", 0)[2] == NotificationPriority.URGENT
    assert expiry_alert_text("Eggs", 1)[2] == NotificationPriority.HIGH
    assert expiry_alert_text("Eggs", 2)[2] == NotificationPriority.MEDIUM
    assert expiry_alert_text("Eggs", 3)[2] == NotificationPriority.MEDIUM


def test_message_restates_day_count():
    title, message, _ = expiry_alert_text("Yogurt", 3)
    assert title == "Expiring Soon"
    assert "Yogurt" in message
    assert "3 days" in message


def test_today_title():
    title, message, _ = expiry_alert_text("Bread", 0)
    assert "Today" in title
    assert "today" in message


def test_only_items_inside_window_are_drafted():
    items = [
        make_item(1, days=-1),
        make_item(2, days=0),
        make_item(3, days=3),
        make_item(4, days=4),
        make_item(5, days=None),
        make_item(6, days=1, quantity=0),
    ]
    drafts = synthesize_expiry_alerts(items, TODAY)
    assert [d.related_item_id for d in drafts] == [2, 3]


def test_drafts_ordered_most_urgent_first():
    items = [make_item(1, days=3), make_item(2, days=0), make_item(3, days=1)]
    drafts = synthesize_expiry_alerts(items, TODAY)
    assert [d.related_item_id for d in drafts] == [2, 3, 1]


def test_max_days_narrows_window():
    items = [make_item(1, days=0), make_item(2, days=1)]
    drafts = synthesize_expiry_alerts(items, TODAY, max_days=0)
    assert [d.related_item_id for d in drafts] == [1]


def test_policy_window():
    items = [make_item(1, days=5)]
    assert synthesize_expiry_alerts(items, TODAY) == []
    policy = ExpiryPolicy(alert_window_days=5)
    assert len(synthesize_expiry_alerts(items, TODAY, policy)) == 1


def test_synthesizer_does_not_deduplicate():
    items = [make_item(1, days=1)]
    first = synthesize_expiry_alerts(items, TODAY)
    second = synthesize_expiry_alerts(items, TODAY)
    assert first == second
    assert len(first) == 1


def test_low_stock_alerts():
    items = [
        make_item(1, name="Rice", quantity=2, threshold=5, unit="kg"),
        make_item(2, quantity=8, threshold=5),
        make_item(3, quantity=0, threshold=5),
    ]
    drafts = synthesize_low_stock_alerts(items)

    assert len(drafts) == 1
    assert drafts[0].type == NotificationType.LOW_STOCK
    assert drafts[0].priority == NotificationPriority.MEDIUM
    assert drafts[0].title == "Low Stock Alert"
    assert "Rice" in drafts[0].message
    assert "2 kg" in drafts[0].message
