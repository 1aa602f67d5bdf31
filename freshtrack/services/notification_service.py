"""Notification storage: deduplication, retention and delivery."""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freshtrack.config import get_settings
from freshtrack.models.notification import Notification
from freshtrack.services.expiry import ExpiryPolicy
from freshtrack.services.expiry_alerts import NotificationDraft
from freshtrack.services.realtime import NotificationEventType, publish_user_event

logger = logging.getLogger(__name__)


def dedupe_key_for(draft: NotificationDraft, day: date) -> str | None:
    """Idempotency key for a draft: one notification per type, item and day.

    Drafts that don't reference an item are never deduplicated.
    """
    if draft.related_item_id is None:
        return None
    return f"{draft.type.value}:{draft.related_item_id}:{day.isoformat()}"


class NotificationService:
    """Service that persists notification drafts and prunes old notifications."""

    def __init__(self, db: Session, policy: ExpiryPolicy | None = None):
        self.db = db
        self.policy = policy or ExpiryPolicy.from_settings(get_settings())

    def _build(
        self, draft: NotificationDraft, dedupe_key: str | None, now: datetime
    ) -> Notification:
        return Notification(
            user_id=draft.user_id,
            type=draft.type.value,
            title=draft.title,
            message=draft.message,
            priority=draft.priority.value,
            related_item_id=draft.related_item_id,
            payload=draft.metadata,
            dedupe_key=dedupe_key,
            expires_at=now + timedelta(days=self.policy.notification_retention_days),
        )

    def _existing_keys(self, user_id: int, keys: set[str]) -> set[str]:
        if not keys:
            return set()
        rows = (
            self.db.query(Notification.dedupe_key)
            .filter(
                Notification.user_id == user_id,
                Notification.dedupe_key.in_(keys),
            )
            .all()
        )
        return {key for (key,) in rows}

    def store_drafts(
        self,
        user_id: int,
        drafts: Iterable[NotificationDraft],
        today: date,
    ) -> list[Notification]:
        """Persist drafts that haven't already been stored today.

        Returns only the notifications created by this call. Drafts already
        stored for the same item and day are skipped; a concurrent writer
        that wins the race is caught by the unique constraint.
        """
        drafts = list(drafts)
        for draft in drafts:
            if draft.user_id != user_id:
                raise ValueError(
                    f"Draft for user {draft.user_id} cannot be stored for user {user_id}"
                )

        keyed = [(draft, dedupe_key_for(draft, today)) for draft in drafts]
        seen = self._existing_keys(user_id, {key for _, key in keyed if key is not None})
        now = datetime.now(UTC)
        created: list[Notification] = []

        for draft, key in keyed:
            if key is not None and key in seen:
                logger.debug(f"Skipping duplicate notification {key} for user {user_id}")
                continue

            notification = self._build(draft, key, now)
            self.db.add(notification)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.info(f"Notification {key} for user {user_id} already stored concurrently")
                continue

            if key is not None:
                seen.add(key)
            created.append(notification)

        for notification in created:
            self.db.refresh(notification)
            publish_user_event(
                user_id,
                NotificationEventType.NOTIFICATION_CREATED,
                {
                    "id": notification.id,
                    "type": notification.type,
                    "title": notification.title,
                    "message": notification.message,
                    "priority": notification.priority,
                    "related_item_id": notification.related_item_id,
                },
            )

        if created:
            logger.info(f"Stored {len(created)}/{len(drafts)} notifications for user {user_id}")
        return created

    def create(self, draft: NotificationDraft) -> Notification:
        """Store a single notification without deduplication."""
        notification = self._build(draft, None, datetime.now(UTC))
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        publish_user_event(
            draft.user_id,
            NotificationEventType.NOTIFICATION_CREATED,
            {"id": notification.id, "type": notification.type, "title": notification.title},
        )
        return notification

    def prune_expired(self, now: datetime | None = None) -> int:
        """Delete expired notifications and read ones older than the retention window."""
        now = now or datetime.now(UTC)
        read_cutoff = now - timedelta(days=self.policy.notification_retention_days)

        deleted = (
            self.db.query(Notification)
            .filter(
                or_(
                    Notification.expires_at < now,
                    (Notification.is_read.is_(True)) & (Notification.read_at < read_cutoff),
                )
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        logger.info(f"Pruned {deleted} old notifications")
        return deleted

    def mark_read(self, notification: Notification) -> Notification:
        """Mark one notification as read."""
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(UTC)
            self.db.commit()
            self.db.refresh(notification)
            publish_user_event(
                notification.user_id,
                NotificationEventType.NOTIFICATION_READ,
                {"id": notification.id},
            )
        return notification

    def mark_unread(self, notification: Notification) -> Notification:
        """Mark one notification as unread."""
        notification.is_read = False
        notification.read_at = None
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of a user as read."""
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update(
                {Notification.is_read: True, Notification.read_at: datetime.now(UTC)},
                synchronize_session=False,
            )
        )
        self.db.commit()
        if updated:
            publish_user_event(
                user_id, NotificationEventType.NOTIFICATION_READ, {"count": updated}
            )
        return updated

    def delete(self, notification: Notification) -> None:
        """Delete one notification."""
        self.db.delete(notification)
        self.db.commit()

    def clear(self, user_id: int) -> int:
        """Delete all of a user's notifications."""
        deleted = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        publish_user_event(
            user_id, NotificationEventType.NOTIFICATIONS_CLEARED, {"count": deleted}
        )
        logger.info(f"Cleared {deleted} notifications for user {user_id}")
        return deleted
