"""
Activity Application Layer
==========================
"""

from caseflow.activity.application.dto import ActivityEntryResponse, NoteCreateDTO
from caseflow.activity.application.services import ActivityLog, IActivityRepository

__all__ = [
    "ActivityEntryResponse",
    "NoteCreateDTO",
    "ActivityLog",
    "IActivityRepository",
]
