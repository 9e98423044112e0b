"""
Activity Infrastructure Models
==============================

SQLAlchemy ORM model for activity entries.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, Integer, String, Text, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.config import ActivityType
from caseflow.core import RepositoryException
from caseflow.infrastructure.database import Base, UTCDateTime


class ActivityEntryModel(Base):
    """
    Database model for ActivityEntry.

    Maps to the 'case_activities' table. Integer ids double as the
    tie-breaker for entries sharing a created_at.
    """
    __tablename__ = "case_activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    activity_type: Mapped[ActivityType] = mapped_column(String(50), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    client_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


@event.listens_for(ActivityEntryModel, "before_update")
def _reject_update(mapper, connection, target):
    raise RepositoryException(f"Activity entry {target.id} is immutable")


@event.listens_for(ActivityEntryModel, "before_delete")
def _reject_delete(mapper, connection, target):
    raise RepositoryException(f"Activity entry {target.id} cannot be deleted")
