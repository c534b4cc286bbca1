import calendar
import logging
from datetime import date

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from renewals.core.errors import NotFoundError, ValidationError
from renewals.models.customer import Customer
from renewals.models.reminder import Reminder
from renewals.schemas.customer import CustomerIn, CustomerPatch
from renewals.services.reminder_service import regenerate_reminders
from renewals.services.send_log_service import log_send, SEND_RENEWED

logger = logging.getLogger(__name__)

TERM_MONTHS = {"+6m": 6, "+12m": 12, "+1y": 12, "+24m": 24}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def normalize_cc(cc: list[str] | None) -> list[str] | None:
    if cc is None:
        return None
    return [normalize_email(e) for e in cc if e and e.strip()]


def add_months(d: date, months: int) -> date:
    """Calendar month addition; days past the end of the target month clamp to its last day."""
    total = d.month - 1 + months
    year, month = d.year + total // 12, total % 12 + 1
    return date(year, month, min(d.day, calendar.monthrange(year, month)[1]))


def get_customer(db: Session, customer_id: int) -> Customer:
    c = db.get(Customer, customer_id)
    if not c:
        raise NotFoundError(f"customer {customer_id} not found")
    return c


def find_by_email(db: Session, email: str) -> Customer | None:
    return db.query(Customer).filter(Customer.primary_email == normalize_email(email)).first()


def _apply(c: Customer, data: CustomerIn) -> None:
    c.company_name = data.company_name
    c.contact_name = data.contact_name
    c.cc_emails = normalize_cc(data.cc_emails)
    c.plan_name = data.plan_name
    c.renew_link = str(data.renew_link) if data.renew_link else None
    c.expires_on = data.expires_on
    c.paused = bool(data.paused)


def _upsert(db: Session, data: CustomerIn, offsets: list[int]) -> tuple[Customer, bool, int]:
    email = normalize_email(data.primary_email)
    c = find_by_email(db, email)
    created = c is None
    if created:
        c = Customer(primary_email=email)
        db.add(c)
    _apply(c, data)
    db.flush()
    count = regenerate_reminders(db, c.id, c.expires_on, offsets)
    return c, created, count


def upsert_customer(db: Session, data: CustomerIn, offsets: list[int]) -> tuple[Customer, bool, int]:
    """Insert or update by primary email, then reschedule reminders. Returns (customer, created, reminders)."""
    c, created, count = _upsert(db, data, offsets)
    db.commit()
    db.refresh(c)
    return c, created, count


def update_customer(db: Session, customer_id: int, patch: CustomerPatch, offsets: list[int]) -> tuple[Customer, int]:
    """Partial edit. Reminders are rescheduled only when expires_on actually changes."""
    c = get_customer(db, customer_id)
    fields = patch.model_dump(exclude_unset=True)

    if "primary_email" in fields:
        if fields["primary_email"] is None:
            raise ValidationError("primary_email cannot be empty")
        email = normalize_email(fields["primary_email"])
        other = find_by_email(db, email)
        if other and other.id != c.id:
            raise ValidationError(f"primary_email {email} already belongs to customer {other.id}")
        c.primary_email = email
    if "expires_on" in fields and fields["expires_on"] is None:
        raise ValidationError("expires_on cannot be empty")

    for name in ("company_name", "contact_name", "plan_name"):
        if name in fields:
            setattr(c, name, fields[name])
    if "cc_emails" in fields:
        c.cc_emails = normalize_cc(fields["cc_emails"])
    if "renew_link" in fields:
        c.renew_link = str(patch.renew_link) if patch.renew_link else None
    if "paused" in fields and fields["paused"] is not None:
        c.paused = bool(fields["paused"])

    count = 0
    if "expires_on" in fields and fields["expires_on"] != c.expires_on:
        c.expires_on = fields["expires_on"]
        db.flush()
        count = regenerate_reminders(db, c.id, c.expires_on, offsets)
    db.commit()
    db.refresh(c)
    return c, count


def list_customers(db: Session, q: str | None = None, paused: bool | None = None,
                   limit: int = 50, offset: int = 0) -> dict:
    query = db.query(Customer)
    if paused is not None:
        query = query.filter(Customer.paused.is_(paused))
    if q:
        ql = f"%{q.strip().lower()}%"
        query = query.filter(or_(
            func.lower(Customer.primary_email).like(ql),
            func.lower(Customer.company_name).like(ql),
            func.lower(Customer.contact_name).like(ql),
            func.lower(Customer.plan_name).like(ql),
        ))
    total = query.count()
    items = (
        query.order_by(Customer.expires_on.asc(), Customer.id.asc())
        .limit(min(max(limit, 1), 200))
        .offset(max(offset, 0))
        .all()
    )
    return {"total": total, "items": items}


def set_paused(db: Session, customer_id: int, paused: bool) -> Customer:
    """Pausing only suppresses delivery; reminder rows stay as they are."""
    c = get_customer(db, customer_id)
    c.paused = paused
    db.commit()
    db.refresh(c)
    return c


def renew_customer(db: Session, customer_id: int, offsets: list[int], term: str | None = None,
                   renew_date: date | None = None, today: date | None = None) -> tuple[date, int]:
    """Move expires_on by a term (+6m/+12m/+1y/+24m) or to an explicit date, then reschedule.

    Term renewals count from the current expires_on, or from today when it is unset.
    An explicit date is taken as-is, past dates included.
    """
    if (term is None) == (renew_date is None):
        raise ValidationError("Provide exactly one of term or date")
    if term is not None and term not in TERM_MONTHS:
        raise ValidationError(f"Invalid term {term!r}; expected one of {', '.join(TERM_MONTHS)}")

    c = get_customer(db, customer_id)
    if renew_date is not None:
        new_expires_on = renew_date
    else:
        base = c.expires_on or today or date.today()
        new_expires_on = add_months(base, TERM_MONTHS[term])

    c.expires_on = new_expires_on
    db.flush()
    count = regenerate_reminders(db, c.id, new_expires_on, offsets)
    log_send(db, c.id, SEND_RENEWED)
    db.commit()
    logger.info("Customer %s renewed until %s (%s reminders scheduled)", c.id, new_expires_on, count)
    return new_expires_on, count


def import_customers(db: Session, rows: list[CustomerIn], offsets: list[int]) -> dict:
    """Upsert rows in order in one transaction; a later row for the same email overwrites an earlier one."""
    inserted, updated, reminders = 0, 0, 0
    for row in rows:
        _, created, count = _upsert(db, row, offsets)
        if created:
            inserted += 1
        else:
            updated += 1
        reminders += count
    db.commit()
    logger.info("Imported customers: %s inserted, %s updated, %s reminders", inserted, updated, reminders)
    return {"inserted": inserted, "updated": updated, "reminders": reminders}


def delete_customer(db: Session, customer_id: int) -> int:
    """Delete a customer and all of its reminders. Send logs are kept. Returns reminders removed."""
    c = get_customer(db, customer_id)
    removed = db.query(Reminder).filter(Reminder.customer_id == c.id).delete(synchronize_session=False)
    db.delete(c)
    db.commit()
    return removed
