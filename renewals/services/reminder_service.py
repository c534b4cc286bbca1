import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from renewals.core.errors import NotFoundError
from renewals.models.customer import Customer
from renewals.models.reminder import Reminder, REMINDER_PENDING

logger = logging.getLogger(__name__)


def scheduled_at_for(expires_on: date, offset_days: int) -> datetime:
    """Reminders fire at 00:00 UTC on expires_on + offset_days."""
    return datetime.combine(expires_on + timedelta(days=offset_days), time(0, 0), tzinfo=timezone.utc)


def regenerate_reminders(db: Session, customer_id: int, expires_on: date, offsets: list[int]) -> int:
    """Replace the customer's pending reminders with one per offset. Flushes, does not commit.

    sent/failed rows are history and are left alone. The caller commits so that the
    purge, the inserts and the customer write land in one transaction.
    """
    # Row lock serializes concurrent regenerations for the same customer
    customer = db.execute(
        select(Customer).where(Customer.id == customer_id).with_for_update()
    ).scalar_one_or_none()
    if not customer:
        raise NotFoundError(f"customer {customer_id} not found")

    db.execute(
        delete(Reminder)
        .where(Reminder.customer_id == customer_id, Reminder.status == REMINDER_PENDING)
        .execution_options(synchronize_session="fetch")
    )
    for offset in offsets:
        db.add(Reminder(
            customer_id=customer_id,
            offset_days=offset,
            scheduled_at=scheduled_at_for(expires_on, offset),
            status=REMINDER_PENDING,
        ))
    db.flush()
    logger.debug("Regenerated %s reminders for customer %s (expires_on=%s)", len(offsets), customer_id, expires_on)
    return len(offsets)


def find_due_reminders(db: Session, now: datetime, limit: int | None = None) -> list[tuple[Reminder, Customer]]:
    """Pending reminders scheduled at or before `now` whose customer is not paused."""
    stmt = (
        select(Reminder, Customer)
        .join(Customer, Customer.id == Reminder.customer_id)
        .where(
            Reminder.status == REMINDER_PENDING,
            Reminder.scheduled_at <= now,
            Customer.paused.is_(False),
        )
        .order_by(Reminder.scheduled_at.asc(), Reminder.id.asc())
    )
    if limit:
        stmt = stmt.limit(limit)
    return [(r, c) for r, c in db.execute(stmt).all()]


def list_reminders(db: Session, customer_id: int) -> list[Reminder]:
    return (
        db.query(Reminder)
        .filter(Reminder.customer_id == customer_id)
        .order_by(Reminder.scheduled_at.asc(), Reminder.id.asc())
        .all()
    )
