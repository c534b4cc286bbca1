from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from renewals.api.deps import require_cron_secret
from renewals.db.session import get_db
from renewals.schemas.delivery import RunResult
from renewals.services.delivery_service import run_once

router = APIRouter(tags=["cron"], dependencies=[Depends(require_cron_secret)])

@router.api_route("/cron/send-reminders", methods=["GET", "POST"], response_model=RunResult)
def send_reminders(dry_run: bool = False, db: Session = Depends(get_db)):
    """Deliver every due reminder now. Individual send failures are counted, not raised."""
    return run_once(db, dry_run=dry_run)
