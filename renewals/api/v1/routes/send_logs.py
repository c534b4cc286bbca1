from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from renewals.api.deps import require_admin
from renewals.db.session import get_db
from renewals.schemas.delivery import SendLogList
from renewals.services.send_log_service import list_send_logs

router = APIRouter(tags=["send-logs"], dependencies=[Depends(require_admin)])

@router.get("/send-logs", response_model=SendLogList)
def send_logs(customer_id: int | None = None, status: str | None = None, limit: int = 50, offset: int = 0,
              db: Session = Depends(get_db)):
    return list_send_logs(db, customer_id=customer_id, status=status, limit=limit, offset=offset)
