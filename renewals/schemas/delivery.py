from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class SendLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reminder_id: Optional[int] = None
    customer_id: int
    status: str
    error: Optional[str] = None
    subject: Optional[str] = None
    days_until_expiry: Optional[int] = None
    created_at: datetime


class SendLogList(BaseModel):
    total: int
    items: List[SendLogOut]


class RunResult(BaseModel):
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    total: int = 0
    dryRun: bool = False


class AdminLoginIn(BaseModel):
    password: str


class AdminLoginOut(BaseModel):
    ok: bool = True
    access_token: str
    token_type: str = "bearer"
