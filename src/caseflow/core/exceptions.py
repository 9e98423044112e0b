"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. None of them is swallowed inside
the engine; the HTTP layer maps each one to a status code.
"""

from typing import Any, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for malformed or missing input. Recoverable by the caller."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[Any] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class InvalidTransitionException(DomainException):
    """Illegal case status change. Surfaced, never retried."""

    def __init__(self, case_id: Any, current: str, requested: str):
        self.case_id = case_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Case {case_id} cannot move from '{current}' to '{requested}'",
            {"case_id": str(case_id), "current": current, "requested": requested}
        )


class StaleWriteException(DomainException):
    """Optimistic concurrency conflict. Caller must re-read and retry."""

    def __init__(self, entity: str, entity_id: Any, expected_version: int):
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"{entity} {entity_id} was modified concurrently "
            f"(expected version {expected_version})",
            {"entity": entity, "id": str(entity_id), "expected_version": expected_version}
        )


class NoPolicyDefinedException(ApplicationException):
    """No SLA policy applies, not even a global default. Configuration gap."""

    def __init__(self, company_id: Any, case_type: str, priority: str):
        self.company_id = company_id
        self.case_type = case_type
        self.priority = priority
        super().__init__(
            f"No SLA policy defined for company {company_id} "
            f"({case_type}/{priority}) and no global default configured",
            {"company_id": str(company_id), "case_type": case_type, "priority": priority}
        )


class InvalidOrExpiredTokenException(DomainException):
    """Share token unknown, revoked, superseded or past its expiry."""

    def __init__(self, message: str = "Share token is invalid or expired"):
        super().__init__(message)


class InvalidStateException(DomainException):
    """Operation not allowed in the entity's current state."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)

