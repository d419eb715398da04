"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

Domain and repository code raises these; application services catch them at
their public boundary and turn them into an ``OperationResult``.
"""

from typing import Optional, Any


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
    """Exception for validation errors."""

    def __init__(
        self,
        message: str,
        reason: str = "validation_error",
        details: Optional[dict] = None
    ):
        self.reason = reason
        super().__init__(message, details)


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class NoOpTransitionException(DomainException):
    """Raised when a ticket is asked to move to the status it already has."""

    def __init__(self, ticket_id: str, status: Any):
        self.ticket_id = ticket_id
        self.status = status
        super().__init__(
            f"Ticket {ticket_id} is already '{getattr(status, 'value', status)}'",
            {"ticket_id": ticket_id, "status": getattr(status, "value", status)}
        )


class InvalidTransitionException(DomainException):
    """Raised when the transition table forbids a status change."""

    def __init__(self, ticket_id: str, current: Any, target: Any):
        self.ticket_id = ticket_id
        self.current = current
        self.target = target
        current_value = getattr(current, "value", current)
        target_value = getattr(target, "value", target)
        super().__init__(
            f"Ticket {ticket_id} cannot move from '{current_value}' to '{target_value}'",
            {"ticket_id": ticket_id, "from": current_value, "to": target_value}
        )
