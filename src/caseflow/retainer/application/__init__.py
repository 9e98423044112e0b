"""
Retainer Application Layer
==========================

Contains:
- Services: RetainerLedger
- Interfaces: IRetainerRepository, IServiceLogRepository
- DTOs: request/response models
"""

from caseflow.retainer.application.dto import (
    LedgerResultResponse,
    RetainerConfigureDTO,
    RetainerResponse,
    RolloverDTO,
    RolloverResponse,
    ServiceEntryCreateDTO,
    ServiceEntryResponse,
    UsageSummaryResponse,
    WaiveDTO,
    WaiveResponse,
)
from caseflow.retainer.application.services import (
    IRetainerRepository,
    IServiceLogRepository,
    RetainerLedger,
)

__all__ = [
    # DTOs
    "LedgerResultResponse",
    "RetainerConfigureDTO",
    "RetainerResponse",
    "RolloverDTO",
    "RolloverResponse",
    "ServiceEntryCreateDTO",
    "ServiceEntryResponse",
    "UsageSummaryResponse",
    "WaiveDTO",
    "WaiveResponse",
    # Services
    "RetainerLedger",
    # Interfaces
    "IRetainerRepository",
    "IServiceLogRepository",
]
