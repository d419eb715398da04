"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system: exceptions, operation results, the clock
and the caller identity.
"""

from ticketdesk.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    ResourceNotFoundException,
    ConfigurationException,
    NoOpTransitionException,
    InvalidTransitionException,
)
from ticketdesk.core.results import OperationResult, StatusChangeResult, result_from_exception
from ticketdesk.core.clock import IClock, SystemClock, FixedClock, ensure_utc
from ticketdesk.core.identity import Actor

__all__ = [
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "ResourceNotFoundException",
    "ConfigurationException",
    "NoOpTransitionException",
    "InvalidTransitionException",
    "OperationResult",
    "StatusChangeResult",
    "result_from_exception",
    "IClock",
    "SystemClock",
    "FixedClock",
    "ensure_utc",
    "Actor",
]
