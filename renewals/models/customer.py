from sqlalchemy import String, Integer, Date, DateTime, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime, timezone
from renewals.db.session import Base

class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    contact_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    primary_email: Mapped[str] = mapped_column(String(320), unique=True, index=True)  # stored trimmed + lowercased
    cc_emails: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    plan_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    renew_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    expires_on: Mapped[date] = mapped_column(Date, index=True)
    paused: Mapped[bool] = mapped_column(Boolean, default=False)

    # mirror of the most recent successful delivery
    last_reminder_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    last_reminder_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
