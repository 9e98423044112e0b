"""
Retainer Infrastructure Models
==============================

SQLAlchemy ORM models for retainer periods and service-log entries.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, Float, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.infrastructure.database import Base, UTCDateTime


class RetainerModel(Base):
    """
    Database model for Retainer.

    Maps to the 'retainers' table; one row per company per billing period.
    """
    __tablename__ = "retainers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)

    # Contract
    retainer_hours: Mapped[float] = mapped_column(Float, nullable=False)
    overage_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_rollover_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tier_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Ledger
    rollover_bank: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    hours_used: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rollover_applied_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("company_id", "period_start", name="uq_retainers_company_period"),
    )


class ServiceLogEntryModel(Base):
    """
    Database model for ServiceLogEntry.

    Maps to the 'service_log_entries' table.
    """
    __tablename__ = "service_log_entries"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    case_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    consultant_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    hours_logged: Mapped[float] = mapped_column(Float, nullable=False)
    billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    consumed_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    service_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    service_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # Waiver
    waived_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    waive_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    waived_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
