import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError
from renewals.db.session import SessionLocal
from renewals.services.delivery_service import run_once

logger = logging.getLogger(__name__)

def send_due_reminders(dry_run: bool = False) -> dict:
    """Deliver due reminders. Run periodically via Celery beat."""
    db: Session = SessionLocal()
    try:
        try:
            return run_once(db, dry_run=dry_run)
        except ProgrammingError:
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            logger.warning("send_due_reminders skipped: tables missing")
            return {"skipped": True, "reason": "missing_tables"}
    finally:
        db.close()
