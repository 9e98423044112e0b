"""
Visibility Infrastructure Models
================================

SQLAlchemy ORM models for share grants and client feedback.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.config import FeedbackSentiment
from caseflow.infrastructure.database import Base, UTCDateTime


class ShareGrantModel(Base):
    """
    Database model for ShareGrant.

    Maps to the 'share_grants' table. Only the token digest is stored.
    """
    __tablename__ = "share_grants"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    case_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    contact_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)


# At most one non-revoked grant per case
Index(
    "uq_share_grants_active_case",
    ShareGrantModel.case_id,
    unique=True,
    postgresql_where=ShareGrantModel.revoked == False,  # noqa: E712
    sqlite_where=ShareGrantModel.revoked == False,  # noqa: E712
)


class ClientFeedbackModel(Base):
    """
    Database model for ClientFeedback.

    Maps to the 'client_feedback' table; one row per grant.
    """
    __tablename__ = "client_feedback"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    grant_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, unique=True)
    case_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    sentiment: Mapped[FeedbackSentiment] = mapped_column(String(20), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
