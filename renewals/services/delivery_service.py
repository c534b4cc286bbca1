"""
Due-reminder delivery.

Each due reminder is rendered, handed to the email transport and moved from
pending to sent or failed exactly once. The transition is a conditional
UPDATE (... WHERE status = 'pending' AND scheduled_at <= now) so two
overlapping runs can never both record the same reminder, and a row that a
renewal purged or replaced in the meantime is never claimed. The loser counts
it as skipped.

A transport error only fails its own reminder. Database errors are not caught
here and abort the run.
"""
import html
import logging
from datetime import date, datetime, timezone
from typing import Callable

from sqlalchemy import update
from sqlalchemy.orm import Session

from renewals.models.customer import Customer
from renewals.models.reminder import Reminder, REMINDER_PENDING, REMINDER_SENT, REMINDER_FAILED
from renewals.services import email_service
from renewals.services.reminder_service import find_due_reminders
from renewals.services.send_log_service import log_send, SEND_SENT, SEND_FAILED, SEND_DRY_RUN

logger = logging.getLogger(__name__)

SendFn = Callable[[str, list[str], str, str], str]


def _plural(n: int) -> str:
    return "day" if abs(n) == 1 else "days"


def days_until(expires_on: date, today: date) -> int:
    return (expires_on - today).days


def render_reminder(customer: Customer, today: date) -> tuple[str, str]:
    """Subject and HTML body for one reminder. Pure: same customer + day gives the same text."""
    days_left = days_until(customer.expires_on, today)
    plan = customer.plan_name or "your plan"
    contact = customer.contact_name or "Customer"
    company = customer.company_name or "your account"
    plan_phrase = f"{customer.plan_name} plan" if customer.plan_name else "plan"
    expires_label = customer.expires_on.strftime("%B %d, %Y").replace(" 0", " ")

    if days_left > 0:
        when = f"expires in {days_left} {_plural(days_left)}"
    elif days_left == 0:
        when = "expires today"
    else:
        when = f"expired {-days_left} {_plural(days_left)} ago"
    subject = f"Renewal Reminder: {plan} {when}"

    link = ""
    if customer.renew_link:
        link = f'<p><a href="{html.escape(customer.renew_link, quote=True)}">Renew Now</a></p>'
    body = (
        "<h2>Renewal Reminder</h2>"
        f"<p>Hello {html.escape(contact)},</p>"
        f"<p>Your {html.escape(plan_phrase)} for <strong>{html.escape(company)}</strong> "
        f"{'expires' if days_left >= 0 else 'expired'} on <strong>{expires_label}</strong>.</p>"
        f"<p>That {'is' if days_left >= 0 else 'was'} {_relative(days_left)}.</p>"
        f"{link}"
    )
    return subject, body


def _relative(days_left: int) -> str:
    if days_left == 0:
        return "today"
    if days_left > 0:
        return f"in {days_left} {_plural(days_left)}"
    return f"{-days_left} {_plural(days_left)} ago"


def _transition(db: Session, reminder_id: int, customer_id: int, status: str, now: datetime,
                provider_message_id: str | None = None) -> bool:
    """pending -> sent/failed. False if someone else already moved, purged or rescheduled it."""
    res = db.execute(
        update(Reminder)
        .where(
            Reminder.id == reminder_id,
            Reminder.customer_id == customer_id,
            Reminder.status == REMINDER_PENDING,
            Reminder.scheduled_at <= now,
        )
        .values(status=status, sent_at=now, provider_message_id=provider_message_id)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1


def _error_text(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def _prepare(due: list[tuple[Reminder, Customer]], today: date) -> list[dict]:
    # Per-reminder commits expire the loaded rows, and a concurrent renewal or
    # delete can remove them, so the loop only works from these plain values.
    items = []
    for reminder, customer in due:
        item = {
            "reminder_id": reminder.id,
            "customer_id": customer.id,
            "to": customer.primary_email,
            "cc": list(customer.cc_emails or []),
            "days_left": days_until(customer.expires_on, today),
            "subject": None,
            "body": None,
            "error": None,
        }
        try:
            item["subject"], item["body"] = render_reminder(customer, today)
        except Exception as exc:
            item["error"] = _error_text(exc)
        items.append(item)
    return items


def run_once(db: Session, now: datetime | None = None, dry_run: bool = False,
             send: SendFn | None = None, limit: int | None = None) -> dict:
    """Deliver every due reminder once. Returns {sent, failed, skipped, total, dryRun}.

    In dry-run mode nothing is sent and reminder/customer rows are untouched; each
    reminder that would go out gets a 'dry-run' send log and is counted as sent.
    A reminder purged or rescheduled by a concurrent renewal, edit or delete is skipped.
    """
    now = now or datetime.now(timezone.utc)
    send = send or email_service.send_email
    today = now.date()
    items = _prepare(find_due_reminders(db, now, limit=limit), today)
    sent, failed, skipped = 0, 0, 0

    for item in items:
        reminder_id, customer_id = item["reminder_id"], item["customer_id"]
        subject, error = item["subject"], item["error"]
        message_id = None
        if error is None and not dry_run:
            try:
                message_id = send(item["to"], item["cc"], subject, item["body"])
            except Exception as exc:
                error = _error_text(exc)
        if error is not None:
            logger.warning("Reminder %s for customer %s failed: %s", reminder_id, customer_id, error)

        if dry_run:
            log_send(db, customer_id, SEND_DRY_RUN, reminder_id=reminder_id, error=error,
                     subject=subject, days_until_expiry=item["days_left"])
            db.commit()
            if error:
                failed += 1
            else:
                sent += 1
            continue

        status = REMINDER_SENT if error is None else REMINDER_FAILED
        if not _transition(db, reminder_id, customer_id, status, now, provider_message_id=message_id or None):
            db.rollback()
            skipped += 1
            continue
        if error is None:
            db.execute(
                update(Customer)
                .where(Customer.id == customer_id)
                .values(last_reminder_status=SEND_SENT, last_reminder_sent_at=now)
                .execution_options(synchronize_session=False)
            )
            log_send(db, customer_id, SEND_SENT, reminder_id=reminder_id,
                     subject=subject, days_until_expiry=item["days_left"])
            sent += 1
        else:
            log_send(db, customer_id, SEND_FAILED, reminder_id=reminder_id, error=error,
                     subject=subject, days_until_expiry=item["days_left"])
            failed += 1
        db.commit()

    if items:
        logger.info("Reminder run (dry_run=%s): %s sent, %s failed, %s skipped of %s due",
                    dry_run, sent, failed, skipped, len(items))
    return {"sent": sent, "failed": failed, "skipped": skipped, "total": len(items), "dryRun": dry_run}
