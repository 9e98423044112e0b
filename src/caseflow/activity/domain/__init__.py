"""
Activity Domain Layer
=====================

Contains:
- Entities: ActivityEntry (immutable)
- Policies: client visibility allow-list
"""

from caseflow.activity.domain.entities import (
    ActivityEntry,
    CLIENT_FACING_TYPES,
    client_projection,
    is_client_visible,
)

__all__ = [
    "ActivityEntry",
    "CLIENT_FACING_TYPES",
    "client_projection",
    "is_client_visible",
]
