"""
Activity Application Services
=============================

The activity log is append-only: the public contract has no update or
delete operation.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from caseflow.activity.domain import ActivityEntry, client_projection
from caseflow.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class IActivityRepository(ABC):
    """Interface for activity entry storage."""

    @abstractmethod
    async def add(self, entry: ActivityEntry) -> ActivityEntry:
        """Persist a new entry and return it with its id."""

    @abstractmethod
    async def list_for_case(self, case_id: UUID) -> List[ActivityEntry]:
        """All entries of a case ordered by created_at ascending."""


class ActivityLog:
    """Append-only activity trail for cases."""

    def __init__(self, repository: IActivityRepository):
        self._repo = repository

    async def append(self, entry: ActivityEntry) -> ActivityEntry:
        stored = await self._repo.add(entry)
        logger.debug(
            "Activity appended",
            extra={
                "case_id": str(stored.case_id),
                "activity_type": stored.activity_type.value,
                "activity_id": stored.id,
            }
        )
        return stored

    async def list_for_case(
        self,
        case_id: UUID,
        include_internal: bool = True
    ) -> List[ActivityEntry]:
        """
        Entries of a case, oldest first.

        With ``include_internal=False`` only entries that pass the client
        allow-list are returned (same rule as the share-token timeline).
        """
        entries = await self._repo.list_for_case(case_id)
        if include_internal:
            return entries
        return client_projection(entries)
