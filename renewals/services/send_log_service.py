from sqlalchemy.orm import Session

from renewals.models.send_log import SendLog

SEND_SENT = "sent"
SEND_FAILED = "failed"
SEND_DRY_RUN = "dry-run"
SEND_RENEWED = "renewed"


def log_send(db: Session, customer_id: int, status: str, reminder_id: int | None = None,
             error: str | None = None, subject: str | None = None, days_until_expiry: int | None = None) -> SendLog:
    """Append an audit row. Not committed here; rides the caller's transaction."""
    entry = SendLog(
        customer_id=customer_id,
        reminder_id=reminder_id,
        status=status,
        error=error,
        subject=(subject or None) and subject[:300],
        days_until_expiry=days_until_expiry,
    )
    db.add(entry)
    return entry


def list_send_logs(db: Session, customer_id: int | None = None, status: str | None = None,
                   limit: int = 50, offset: int = 0) -> dict:
    query = db.query(SendLog)
    if customer_id is not None:
        query = query.filter(SendLog.customer_id == customer_id)
    if status:
        query = query.filter(SendLog.status == status)
    total = query.count()
    items = query.order_by(SendLog.id.desc()).limit(min(limit, 200)).offset(max(offset, 0)).all()
    return {"total": total, "items": items}
