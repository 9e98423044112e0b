"""
SLA Application Layer
=====================

Contains:
- Services: SLAPolicyResolver, SLAMonitor, SLASweepService, SLAService,
  SLAPolicyService
- DTOs: request/response models

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from caseflow.sla.application.dto import (
    CaseSLAResponse,
    DashboardResponse,
    DimensionResponse,
    PolicyCreateDTO,
    PolicyResponse,
    SweepResponse,
)
from caseflow.sla.application.services import (
    DashboardSummary,
    ISLAConfigProvider,
    ISLAPolicyRepository,
    SLAMonitor,
    SLAPolicyResolver,
    SLAPolicyService,
    SLAService,
    SLASweepService,
    SweepResult,
)

__all__ = [
    # DTOs
    "CaseSLAResponse",
    "DashboardResponse",
    "DimensionResponse",
    "PolicyCreateDTO",
    "PolicyResponse",
    "SweepResponse",
    # Services
    "DashboardSummary",
    "SLAMonitor",
    "SLAPolicyResolver",
    "SLAPolicyService",
    "SLAService",
    "SLASweepService",
    "SweepResult",
    # Interfaces
    "ISLAConfigProvider",
    "ISLAPolicyRepository",
]
