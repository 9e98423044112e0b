"""
Visibility Domain Layer
=======================

Contains:
- Entities: ShareGrant, ClientFeedback
- Value Objects: IssuedToken, CaseTimelineView
- Token helpers
"""

from caseflow.visibility.domain.entities import (
    CaseTimelineView,
    ClientFeedback,
    IssuedToken,
    ShareGrant,
    generate_token,
    hash_token,
)

__all__ = [
    "CaseTimelineView",
    "ClientFeedback",
    "IssuedToken",
    "ShareGrant",
    "generate_token",
    "hash_token",
]
