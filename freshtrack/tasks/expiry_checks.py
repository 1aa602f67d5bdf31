"""Celery tasks for scheduled expiry checks and notification housekeeping."""

import logging

from sqlalchemy.orm import Session

from freshtrack.celery_app import app as celery_app
from freshtrack.database import SessionLocal
from freshtrack.services.expiry_service import ExpiryService
from freshtrack.services.grocery_service import GroceryService
from freshtrack.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@celery_app.task
def check_expiry_for_all_users() -> dict:
    """Store expiry and low-stock alerts for every user who wants them.

    Runs daily via celery-beat. Alerts already stored today are skipped, so
    re-running the task is harmless.

    Returns:
        dict with the number of notifications created
    """
    db: Session = SessionLocal()

    try:
        created = ExpiryService(db).check_all_users(include_low_stock=True)
        logger.info(f"Daily expiry check stored {created} notifications")
        return {"notifications_created": created}

    except Exception as e:
        logger.error(f"Error in daily expiry check: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}

    finally:
        db.close()


@celery_app.task
def notify_expiring_today() -> dict:
    """Alert on items that expire today. Runs hourly."""
    db: Session = SessionLocal()

    try:
        created = ExpiryService(db).check_all_users(max_days=0, include_low_stock=False)
        return {"notifications_created": created}

    except Exception as e:
        logger.error(f"Error in expires-today check: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}

    finally:
        db.close()


@celery_app.task
def auto_mark_expired_items() -> dict:
    """Move active items past their expiry date to ``expired``. Runs nightly."""
    db: Session = SessionLocal()

    try:
        marked = GroceryService(db).mark_expired_items()
        return {"items_marked": marked}

    except Exception as e:
        logger.error(f"Error marking expired items: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}

    finally:
        db.close()


@celery_app.task
def cleanup_old_notifications() -> dict:
    """Delete expired notifications and old read ones. Runs nightly."""
    db: Session = SessionLocal()

    try:
        deleted = NotificationService(db).prune_expired()
        return {"notifications_deleted": deleted}

    except Exception as e:
        logger.error(f"Error cleaning up notifications: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}

    finally:
        db.close()
