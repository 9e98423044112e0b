"""
Case Application Layer
======================

Contains:
- Services: CaseService (the Case Store)
- DTOs: request/response models

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from caseflow.cases.application.dto import (
    CaseCreateDTO,
    CaseListQueryDTO,
    CaseReassignDTO,
    CaseRespondDTO,
    CaseResponse,
    CaseTransitionDTO,
)
from caseflow.cases.application.services import (
    CaseService,
    CaseTransitionResult,
    ICaseRepository,
    ICaseSLAMonitor,
)

__all__ = [
    # DTOs
    "CaseCreateDTO",
    "CaseListQueryDTO",
    "CaseReassignDTO",
    "CaseRespondDTO",
    "CaseResponse",
    "CaseTransitionDTO",
    # Services
    "CaseService",
    "CaseTransitionResult",
    # Interfaces
    "ICaseRepository",
    "ICaseSLAMonitor",
]
