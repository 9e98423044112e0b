"""
Case Infrastructure Models
==========================

SQLAlchemy ORM model for the Case entity.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Float, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.config import CasePriority, CaseSource, CaseStatus, CaseType, CaseVisibility
from caseflow.infrastructure.database import Base, UTCDateTime


class CaseModel(Base):
    """
    Database model for Case entity.

    Maps to the 'cases' table. ``version`` backs optimistic concurrency.
    """
    __tablename__ = "cases"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Ownership
    company_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    client_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)

    # Content
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Classification
    type: Mapped[CaseType] = mapped_column(String(50), nullable=False)
    priority: Mapped[CasePriority] = mapped_column(String(50), nullable=False, default=CasePriority.MEDIUM)
    source: Mapped[CaseSource] = mapped_column(String(50), nullable=False, default=CaseSource.MANUAL)
    status: Mapped[CaseStatus] = mapped_column(String(50), nullable=False, default=CaseStatus.OPEN)

    # Visibility
    visibility: Mapped[CaseVisibility] = mapped_column(String(50), nullable=False, default=CaseVisibility.INTERNAL)
    client_viewable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    closed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    first_response_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    # Effort
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    actual_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Assignment
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    assigned_team: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    internal_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    external_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        Index("ix_cases_company_status", "company_id", "status"),
    )
