"""Runs hourly: delete expired notifications and read notifications past the retention window."""
import logging

from sad.db.session import SessionLocal
from sad.services.notification_service import prune_notifications

logger = logging.getLogger(__name__)


def run_notification_cleanup_job() -> None:
    db = SessionLocal()
    try:
        deleted = prune_notifications(db)
        if deleted["expired"] or deleted["old_read"]:
            logger.info("Notification cleanup: expired=%s old_read=%s", deleted["expired"], deleted["old_read"])
    except Exception as e:
        logger.exception("Notification cleanup job failed: %s", e)
        db.rollback()
    finally:
        db.close()
