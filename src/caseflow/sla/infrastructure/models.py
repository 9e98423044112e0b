"""
SLA Infrastructure Models
=========================

SQLAlchemy ORM model for company-specific SLA policies.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Float, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.config import CasePriority, CaseType
from caseflow.infrastructure.database import Base, UTCDateTime


class SLAPolicyModel(Base):
    """
    Database model for SLAPolicy.

    Maps to the 'sla_policies' table. Null case_type/priority is the
    company default row.
    """
    __tablename__ = "sla_policies"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)

    case_type: Mapped[Optional[CaseType]] = mapped_column(String(50), nullable=True)
    priority: Mapped[Optional[CasePriority]] = mapped_column(String(50), nullable=True)

    # Budgets in hours
    response_time_budget: Mapped[float] = mapped_column(Float, nullable=False)
    resolution_time_budget: Mapped[float] = mapped_column(Float, nullable=False)
    escalation_time_budget: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("ix_sla_policies_lookup", "company_id", "case_type", "priority"),
    )
