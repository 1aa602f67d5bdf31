"""Notification API and store tests."""

from datetime import UTC, date, datetime, timedelta

import pytest

from freshtrack.models.enums import NotificationPriority, NotificationType
from freshtrack.models.grocery_item import GroceryItem
from freshtrack.models.notification import Notification
from freshtrack.services.expiry import ExpiryPolicy
from freshtrack.services.expiry_alerts import NotificationDraft
from freshtrack.services.notification_service import NotificationService, dedupe_key_for


def create_notification(client, headers, title="Hello", **fields):
    response = client.post(
        "/api/v1/notifications",
        headers=headers,
        json={"title": title, "message": f"{title} message", **fields},
    )
    assert response.status_code == 201, response.text
    return response.json()


def make_draft(user_id, item_id, title="Expires Tomorrow"):
    return NotificationDraft(
        user_id=user_id,
        type=NotificationType.EXPIRY_ALERT,
        title=title,
        message="Milk expires tomorrow (in 1 day). Plan to use it soon.",
        priority=NotificationPriority.HIGH,
        related_item_id=item_id,
        metadata={"item_name": "Milk", "days_remaining": 1},
    )


def add_item(db, user_id, category):
    item = GroceryItem(user_id=user_id, category_id=category.id, name="Milk", quantity=1)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def test_create_custom_notification(client, auth_headers):
    data = create_notification(
        client, auth_headers, title="Shopping", priority="low", metadata={"store": "corner"}
    )
    assert data["type"] == "general"
    assert data["priority"] == "low"
    assert data["is_read"] is False
    assert data["metadata"] == {"store": "corner"}
    assert data["expires_at"] is not None


def test_create_notification_for_other_users_item(
    client, auth_headers, other_auth_headers, db, category
):
    item = add_item(db, other_auth_headers.user_id, category)
    response = client.post(
        "/api/v1/notifications",
        headers=auth_headers,
        json={"title": "Hi", "message": "There", "related_item_id": item.id},
    )
    assert response.status_code == 404


def test_list_notifications_newest_first(client, auth_headers):
    for title in ("First", "Second", "Third"):
        create_notification(client, auth_headers, title=title)

    response = client.get("/api/v1/notifications?limit=2", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["pages"] == 2
    assert [n["title"] for n in data["items"]] == ["Third", "Second"]


def test_list_filters_by_read_state(client, auth_headers):
    first = create_notification(client, auth_headers, title="First")
    create_notification(client, auth_headers, title="Second")
    client.patch(f"/api/v1/notifications/{first['id']}/read", headers=auth_headers)

    unread = client.get("/api/v1/notifications?read=false", headers=auth_headers).json()
    assert [n["title"] for n in unread["items"]] == ["Second"]

    read = client.get("/api/v1/notifications?read=true", headers=auth_headers).json()
    assert [n["title"] for n in read["items"]] == ["First"]


def test_list_filters_by_type(client, auth_headers):
    create_notification(client, auth_headers, title="Note")
    create_notification(client, auth_headers, title="Buy rice", type="low_stock")
    create_notification(client, auth_headers, title="Sale", type="price_alert")

    response = client.get("/api/v1/notifications?type=low_stock", headers=auth_headers)
    assert response.status_code == 200
    assert [n["title"] for n in response.json()["items"]] == ["Buy rice"]

    response = client.get("/api/v1/notifications/type/price_alert", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["title"] == "Sale"

    response = client.get("/api/v1/notifications/type/unknown", headers=auth_headers)
    assert response.status_code == 422


def test_read_and_unread(client, auth_headers):
    notification = create_notification(client, auth_headers)

    response = client.patch(
        f"/api/v1/notifications/{notification['id']}/read", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["is_read"] is True
    assert response.json()["read_at"] is not None

    response = client.patch(
        f"/api/v1/notifications/{notification['id']}/unread", headers=auth_headers
    )
    assert response.json()["is_read"] is False
    assert response.json()["read_at"] is None


def test_unread_count_and_read_all(client, auth_headers):
    for title in ("A", "B", "C"):
        create_notification(client, auth_headers, title=title)

    assert client.get("/api/v1/notifications/unread-count", headers=auth_headers).json() == {
        "count": 3
    }

    response = client.patch("/api/v1/notifications/read-all", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["count"] == 3

    response = client.get("/api/v1/notifications/unread-count", headers=auth_headers)
    assert response.json()["count"] == 0


def test_get_and_delete_notification(client, auth_headers):
    notification = create_notification(client, auth_headers)

    response = client.get(f"/api/v1/notifications/{notification['id']}", headers=auth_headers)
    assert response.status_code == 200

    response = client.delete(f"/api/v1/notifications/{notification['id']}", headers=auth_headers)
    assert response.status_code == 204

    response = client.get(f"/api/v1/notifications/{notification['id']}", headers=auth_headers)
    assert response.status_code == 404


def test_clear_notifications(client, auth_headers, other_auth_headers):
    create_notification(client, auth_headers, title="Mine")
    create_notification(client, other_auth_headers, title="Theirs")

    response = client.delete("/api/v1/notifications", headers=auth_headers)
    assert response.json()["count"] == 1

    response = client.get("/api/v1/notifications", headers=other_auth_headers)
    assert response.json()["total"] == 1


def test_notifications_are_scoped_to_owner(client, auth_headers, other_auth_headers):
    notification = create_notification(client, auth_headers)
    response = client.patch(
        f"/api/v1/notifications/{notification['id']}/read", headers=other_auth_headers
    )
    assert response.status_code == 404


def test_dedupe_key_format():
    draft = make_draft(1, 42)
    assert dedupe_key_for(draft, date(2024, 3, 15)) == "expiry_alert:42:2024-03-15"


def test_store_drafts_skips_duplicates(db, auth_headers, category, mock_redis):
    user_id = auth_headers.user_id
    item = add_item(db, user_id, category)
    service = NotificationService(db)
    today = date(2024, 3, 15)

    created = service.store_drafts(user_id, [make_draft(user_id, item.id)], today)
    assert len(created) == 1
    assert created[0].dedupe_key == f"expiry_alert:{item.id}:2024-03-15"

    assert service.store_drafts(user_id, [make_draft(user_id, item.id)], today) == []

    # A new day gets a new alert
    tomorrow = today + timedelta(days=1)
    assert len(service.store_drafts(user_id, [make_draft(user_id, item.id)], tomorrow)) == 1
    assert db.query(Notification).count() == 2


def test_store_drafts_rejects_other_owner(db, auth_headers):
    service = NotificationService(db)
    with pytest.raises(ValueError, match="cannot be stored"):
        service.store_drafts(auth_headers.user_id, [make_draft(999, 1)], date(2024, 3, 15))


def test_store_drafts_survives_publish_failure(db, auth_headers, category, mock_redis):
    mock_redis.publish.side_effect = Exception("Redis connection failed")
    user_id = auth_headers.user_id
    item = add_item(db, user_id, category)

    created = NotificationService(db).store_drafts(
        user_id, [make_draft(user_id, item.id)], date(2024, 3, 15)
    )
    assert len(created) == 1


def test_prune_expired(db, auth_headers):
    user_id = auth_headers.user_id
    now = datetime.now(UTC)
    db.add_all(
        [
            Notification(
                user_id=user_id,
                type="general",
                title="Past expiry",
                message="m",
                expires_at=now - timedelta(days=1),
            ),
            Notification(
                user_id=user_id,
                type="general",
                title="Read long ago",
                message="m",
                is_read=True,
                read_at=now - timedelta(days=40),
                expires_at=now + timedelta(days=5),
            ),
            Notification(
                user_id=user_id,
                type="general",
                title="Keep",
                message="m",
                expires_at=now + timedelta(days=5),
            ),
        ]
    )
    db.commit()

    deleted = NotificationService(db, ExpiryPolicy(notification_retention_days=30)).prune_expired(
        now
    )
    assert deleted == 2
    assert [n.title for n in db.query(Notification).all()] == ["Keep"]
