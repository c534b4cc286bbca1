from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from renewals.api.deps import require_admin, reminder_offsets
from renewals.core.errors import NotFoundError, ValidationError
from renewals.db.session import get_db
from renewals.schemas.customer import (
    CsvImportRequest, CustomerIn, CustomerList, CustomerOut, CustomerPatch, ImportRequest, ImportResponse,
    PauseIn, ReminderOut, RenewIn, RenewOut,
)
from renewals.services import customer_service
from renewals.services.csv_import import parse_customers_csv
from renewals.services.reminder_service import list_reminders

router = APIRouter(tags=["customers"], dependencies=[Depends(require_admin)])

@router.get("/customers", response_model=CustomerList)
def list_customers(q: str | None = None, paused: bool | None = None, limit: int = 50, offset: int = 0,
                   db: Session = Depends(get_db)):
    return customer_service.list_customers(db, q=q, paused=paused, limit=limit, offset=offset)

@router.post("/customers", response_model=CustomerOut, status_code=201)
def create_customer(body: CustomerIn, response: Response,
                    db: Session = Depends(get_db), offsets: list[int] = Depends(reminder_offsets)):
    customer, created, _ = customer_service.upsert_customer(db, body, offsets)
    if not created:
        response.status_code = 200
    return customer

@router.post("/customers/import", response_model=ImportResponse)
def import_customers(body: ImportRequest, db: Session = Depends(get_db),
                     offsets: list[int] = Depends(reminder_offsets)):
    return customer_service.import_customers(db, body.rows, offsets)

@router.post("/customers/import/csv", response_model=ImportResponse)
def import_customers_csv(body: CsvImportRequest, db: Session = Depends(get_db),
                         offsets: list[int] = Depends(reminder_offsets)):
    rows, errors = parse_customers_csv(body.csv)
    if not rows and errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    result = customer_service.import_customers(db, rows, offsets)
    return ImportResponse(**result, errors=errors)

@router.get("/customers/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    try:
        return customer_service.get_customer(db, customer_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")

@router.patch("/customers/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, body: CustomerPatch, db: Session = Depends(get_db),
                    offsets: list[int] = Depends(reminder_offsets)):
    try:
        customer, _ = customer_service.update_customer(db, customer_id, body, offsets)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return customer

@router.delete("/customers/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    try:
        removed = customer_service.delete_customer(db, customer_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"ok": True, "remindersDeleted": removed}

@router.post("/customers/{customer_id}/pause")
def pause_customer(customer_id: int, body: PauseIn, db: Session = Depends(get_db)):
    try:
        customer = customer_service.set_paused(db, customer_id, body.paused)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"ok": True, "paused": customer.paused}

@router.post("/customers/{customer_id}/renew", response_model=RenewOut)
def renew_customer(customer_id: int, body: RenewIn, db: Session = Depends(get_db),
                   offsets: list[int] = Depends(reminder_offsets)):
    try:
        new_expires_on, created = customer_service.renew_customer(
            db, customer_id, offsets, term=body.term, renew_date=body.renew_date,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RenewOut(new_expires_on=new_expires_on, created=created)

@router.get("/customers/{customer_id}/reminders", response_model=list[ReminderOut])
def customer_reminders(customer_id: int, db: Session = Depends(get_db)):
    try:
        customer_service.get_customer(db, customer_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    return list_reminders(db, customer_id)
