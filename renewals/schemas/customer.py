from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

RenewalTerm = Literal["+6m", "+12m", "+1y", "+24m"]


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _split_cc(v):
    # import rows may carry "a@x.com, b@x.com" (or ';' from CSV) instead of a list
    if v is None:
        return None
    if isinstance(v, str):
        v = v.replace(";", ",").split(",")
    return [e.strip() for e in v if e and e.strip()]


class CustomerIn(BaseModel):
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    primary_email: EmailStr
    cc_emails: Optional[List[EmailStr]] = None
    plan_name: Optional[str] = None
    renew_link: Optional[AnyHttpUrl] = None
    expires_on: date
    paused: bool = False

    @field_validator("company_name", "contact_name", "plan_name", "renew_link", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("cc_emails", mode="before")
    @classmethod
    def split_cc(cls, v):
        return _split_cc(v)


class CustomerPatch(BaseModel):
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    primary_email: Optional[EmailStr] = None
    cc_emails: Optional[List[EmailStr]] = None
    plan_name: Optional[str] = None
    renew_link: Optional[AnyHttpUrl] = None
    expires_on: Optional[date] = None
    paused: Optional[bool] = None

    @field_validator("company_name", "contact_name", "plan_name", "renew_link", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("cc_emails", mode="before")
    @classmethod
    def split_cc(cls, v):
        return _split_cc(v)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    primary_email: str
    cc_emails: Optional[List[str]] = None
    plan_name: Optional[str] = None
    renew_link: Optional[str] = None
    expires_on: date
    paused: bool = False
    last_reminder_status: Optional[str] = None
    last_reminder_sent_at: Optional[datetime] = None


class CustomerList(BaseModel):
    total: int
    items: List[CustomerOut]


class PauseIn(BaseModel):
    paused: bool


class RenewIn(BaseModel):
    """Exactly one of term / date."""
    model_config = ConfigDict(populate_by_name=True)

    term: Optional[RenewalTerm] = None
    renew_date: Optional[date] = Field(default=None, alias="date")

    @model_validator(mode="after")
    def one_of_term_or_date(self):
        if self.term is None and self.renew_date is None:
            raise ValueError("Either term or date must be provided")
        if self.term is not None and self.renew_date is not None:
            raise ValueError("Provide either term or date, not both")
        return self


class RenewOut(BaseModel):
    ok: bool = True
    new_expires_on: date
    created: int


class ImportRequest(BaseModel):
    rows: List[CustomerIn]


class CsvImportRequest(BaseModel):
    csv: str


class ImportResponse(BaseModel):
    inserted: int = 0
    updated: int = 0
    reminders: int = 0
    errors: List[str] = Field(default_factory=list)


class ReminderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    offset_days: int
    scheduled_at: datetime
    status: str
    sent_at: Optional[datetime] = None
    provider_message_id: Optional[str] = None
