"""
Supplier Application Services
=============================

The Supplier Registry: supplier lookups for the ticket engine plus the
supplier CRUD the management screens need.

Following SOLID principles:
- Dependency Inversion: depends on ``ISupplierRepository``, not SQLAlchemy
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, List, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from ticketdesk.config import DEFAULT_SLA_HOURS
from ticketdesk.core import (
    Actor,
    IClock,
    OperationResult,
    ResourceNotFoundException,
    SystemClock,
    result_from_exception,
)
from ticketdesk.shared.infrastructure.logging import get_logger
from ticketdesk.suppliers.application.dto import SupplierCreateDTO, SupplierUpdateDTO
from ticketdesk.suppliers.domain import Supplier

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ISupplierRepository(ABC):
    """Interface for supplier data access."""

    @abstractmethod
    async def get_by_id(self, supplier_id: str) -> Optional[Supplier]:
        """Get supplier by ID."""

    @abstractmethod
    async def list_active(self) -> List[Supplier]:
        """Active suppliers ordered by name."""

    @abstractmethod
    async def list_all(self) -> List[Supplier]:
        """All suppliers ordered by name."""

    @abstractmethod
    async def insert(self, supplier: Supplier) -> Supplier:
        """Persist a new supplier."""

    @abstractmethod
    async def update_by_id(self, supplier_id: str, changes: dict[str, Any]) -> Optional[Supplier]:
        """Apply field changes; None when the supplier does not exist."""

    @abstractmethod
    async def delete_by_id(self, supplier_id: str) -> bool:
        """Delete supplier; False when it did not exist."""


def _validation_failure(exc: ValidationError) -> OperationResult:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    if any(err["field"] == "sla_hours" for err in errors):
        return OperationResult.invalid("invalid_sla_hours", "SLA hours failed validation", {"errors": errors})
    return OperationResult.invalid("invalid_payload", "Payload failed validation", {"errors": errors})


# ========== Application Services ==========

class SupplierRegistry:
    """
    Holds support-vendor records and answers SLA-hour lookups.

    Lookups used by ticket intake (``get_supplier``, ``resolve_sla_hours``)
    degrade to "absent" on backend errors so intake can fall back to the
    default SLA. Every other method returns an ``OperationResult``.
    """

    def __init__(
        self,
        supplier_repository: ISupplierRepository,
        clock: Optional[IClock] = None
    ):
        self._supplier_repo = supplier_repository
        self._clock = clock or SystemClock()

    async def get_supplier(self, supplier_id: Optional[str]) -> Optional[Supplier]:
        """Supplier by id, or None when missing, blank or unreachable."""
        if not supplier_id:
            return None
        try:
            return await self._supplier_repo.get_by_id(supplier_id)
        except Exception as exc:
            logger.error(
                "Supplier lookup failed",
                extra={"supplier_id": supplier_id, "error": str(exc)}
            )
            return None

    async def resolve_sla_hours(
        self,
        supplier_id: Optional[str],
        default: int = DEFAULT_SLA_HOURS
    ) -> int:
        """SLA hours of the supplier, ``default`` when it cannot be resolved."""
        supplier = await self.get_supplier(supplier_id)
        if supplier is None:
            return default
        return supplier.sla_hours

    async def find_supplier(self, supplier_id: str) -> OperationResult[Supplier]:
        """Like ``get_supplier`` but tells missing apart from unreachable."""
        try:
            supplier = await self._supplier_repo.get_by_id(supplier_id)
            if supplier is None:
                raise ResourceNotFoundException("Supplier", supplier_id)
            return OperationResult.success(supplier)
        except Exception as exc:
            return self._failure("find_supplier", exc, supplier_id=supplier_id)

    async def list_active_suppliers(self) -> OperationResult[List[Supplier]]:
        """Active suppliers ordered by name (what intake forms offer)."""
        try:
            return OperationResult.success(await self._supplier_repo.list_active())
        except Exception as exc:
            return self._failure("list_active_suppliers", exc)

    async def list_suppliers(self) -> OperationResult[List[Supplier]]:
        try:
            return OperationResult.success(await self._supplier_repo.list_all())
        except Exception as exc:
            return self._failure("list_suppliers", exc)

    async def add_supplier(
        self,
        fields: Union[SupplierCreateDTO, dict],
        actor: Actor
    ) -> OperationResult[Supplier]:
        """Register a supplier. ``sla_hours`` must be positive."""
        try:
            dto = fields if isinstance(fields, SupplierCreateDTO) else SupplierCreateDTO.model_validate(fields)
        except ValidationError as exc:
            return _validation_failure(exc)

        try:
            now = self._clock.now()
            supplier = Supplier(
                id=str(uuid4()),
                name=dto.name.strip(),
                category=dto.category,
                sla_hours=dto.sla_hours,
                active=dto.active,
                created_at=now,
                updated_at=now,
                created_by=actor.id,
            )
            created = await self._supplier_repo.insert(supplier)
            logger.info(
                "Supplier registered",
                extra={"supplier_id": created.id, "sla_hours": created.sla_hours, "actor_id": actor.id}
            )
            return OperationResult.success(created)
        except Exception as exc:
            return self._failure("add_supplier", exc)

    async def update_supplier(
        self,
        supplier_id: str,
        partial: Union[SupplierUpdateDTO, dict]
    ) -> OperationResult[Supplier]:
        """
        Edit a supplier.

        Existing tickets keep their deadlines; only tickets created
        afterwards see a new ``sla_hours``.
        """
        try:
            dto = partial if isinstance(partial, SupplierUpdateDTO) else SupplierUpdateDTO.model_validate(partial)
        except ValidationError as exc:
            return _validation_failure(exc)

        changes = dto.model_dump(exclude_unset=True)
        try:
            existing = await self._supplier_repo.get_by_id(supplier_id)
            if existing is None:
                raise ResourceNotFoundException("Supplier", supplier_id)
            if not changes:
                return OperationResult.success(existing)

            changes["updated_at"] = self._clock.now()
            # replace() re-runs __post_init__ validation on the merged record
            replace(existing, **changes)

            updated = await self._supplier_repo.update_by_id(supplier_id, changes)
            if updated is None:
                raise ResourceNotFoundException("Supplier", supplier_id)
            return OperationResult.success(updated)
        except Exception as exc:
            return self._failure("update_supplier", exc, supplier_id=supplier_id)

    async def delete_supplier(self, supplier_id: str) -> OperationResult[bool]:
        try:
            if not await self._supplier_repo.delete_by_id(supplier_id):
                raise ResourceNotFoundException("Supplier", supplier_id)
            logger.info("Supplier deleted", extra={"supplier_id": supplier_id})
            return OperationResult.success(True)
        except Exception as exc:
            return self._failure("delete_supplier", exc, supplier_id=supplier_id)

    def _failure(self, operation: str, exc: Exception, **context) -> OperationResult:
        result = result_from_exception(exc)
        log = logger.error if result.reason == "backend_error" else logger.info
        log(
            f"{operation} did not complete",
            extra={"operation": operation, "outcome": result.outcome.value, "error": str(exc), **context}
        )
        return result
