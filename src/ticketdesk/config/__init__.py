"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Also holds the enumerations shared by every bounded context
(ticket lifecycle vocabulary, SLA states, operation outcomes).
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="ticketdesk", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Storage ==========
    storage_backend: str = Field(
        default="database",
        description="Where tickets live: 'database' (SQLAlchemy) or 'memory'"
    )
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/ticketdesk",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Ticket Engine Policy ==========
    ticket_policy_path: Path = Field(
        default=Path("ticket_policy.yaml"),
        description="Path to the ticket engine policy YAML file"
    )
    watch_policy_file: bool = Field(
        default=True,
        description="Hot-reload the policy file when it changes"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Ensure the storage backend is supported."""
        allowed = {"database", "memory"}
        if v not in allowed:
            raise ValueError(f"storage_backend must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

DEFAULT_SLA_HOURS = 24

# One year; larger values push deadlines past what the stores can hold
MAX_SLA_HOURS = 8760


class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    AWAITING_THIRD_PARTY = "awaiting-third-party"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Ticket priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketType(str, Enum):
    """Problem categories a ticket can be filed under."""
    INTERNET_DOWN = "internet-down"
    INTERMITTENT_LINK = "intermittent-link"
    BILLING_SYSTEM_DOWN = "billing-system-down"
    VALIDATOR_FROZEN = "validator-frozen"
    HARDWARE = "hardware"
    SOFTWARE = "software"
    OTHER = "other"


class InteractionType(str, Enum):
    """Kinds of entries in a ticket's timeline."""
    COMMENT = "comment"
    CALL = "call"
    EMAIL = "email"
    SUPPLIER_CALLBACK = "supplier-callback"
    STATUS_CHANGE = "status-change"


class SupplierCategory(str, Enum):
    """Support vendor categories."""
    CARRIER = "carrier"
    BILLING_SYSTEM_VENDOR = "billing-system-vendor"
    IT_VENDOR = "it-vendor"
    OTHER = "other"


class SLAState(str, Enum):
    """Derived SLA classification buckets."""
    UNDEFINED = "undefined"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"
    RESOLVED = "resolved"
    OVERDUE = "overdue"
    CRITICAL = "critical"
    WARNING = "warning"
    ON_TRACK = "on_track"


class Outcome(str, Enum):
    """Discriminator for the result of a public engine operation."""
    SUCCESS = "success"
    REJECTED = "rejected"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class AuditOutcome(str, Enum):
    """What happened to the audit entry written after a status change."""
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


RESOLVED_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)
