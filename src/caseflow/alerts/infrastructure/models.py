"""
Alert Infrastructure Models
===========================

SQLAlchemy ORM model for alerts. ``dedup_key`` is unique; inserts use
ON CONFLICT DO NOTHING so concurrent evaluators cannot double-alert.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.config import AlertType
from caseflow.infrastructure.database import Base, UTCDateTime


class AlertModel(Base):
    """
    Database model for Alert entity.

    Maps to the 'alerts' table.
    """
    __tablename__ = "alerts"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Idempotency
    dedup_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # References
    company_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    case_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)

    # Alert details
    alert_type: Mapped[AlertType] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # Notification tracking
    notification_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    notification_sent_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    delivery_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
