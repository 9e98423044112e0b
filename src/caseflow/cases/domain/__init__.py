"""
Case Domain Layer
=================

Contains:
- Entities: Case (with its status state machine)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from caseflow.cases.domain.entities import ALLOWED_TRANSITIONS, Case

__all__ = ["ALLOWED_TRANSITIONS", "Case"]
