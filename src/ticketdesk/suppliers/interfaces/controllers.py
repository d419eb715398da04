"""
Supplier Controllers (API Routes)
=================================

FastAPI routes for the supplier registry.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from ticketdesk.core import Actor
from ticketdesk.infrastructure.container import ServiceContainer
from ticketdesk.shared.api.dependencies import get_actor, get_container, unwrap
from ticketdesk.suppliers.application import (
    SupplierCreateDTO,
    SupplierRegistry,
    SupplierResponse,
    SupplierUpdateDTO,
)

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


def get_supplier_registry(container: ServiceContainer = Depends(get_container)) -> SupplierRegistry:
    return container.suppliers


@router.get("", response_model=List[SupplierResponse], summary="List suppliers by name")
async def list_suppliers(
    active_only: bool = Query(False, description="Only suppliers that can be picked for new tickets"),
    registry: SupplierRegistry = Depends(get_supplier_registry)
):
    if active_only:
        suppliers = unwrap(await registry.list_active_suppliers())
    else:
        suppliers = unwrap(await registry.list_suppliers())
    return [SupplierResponse.from_domain(s) for s in suppliers]


@router.post(
    "",
    response_model=SupplierResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a supplier"
)
async def create_supplier(
    body: SupplierCreateDTO,
    actor: Actor = Depends(get_actor),
    registry: SupplierRegistry = Depends(get_supplier_registry)
):
    return SupplierResponse.from_domain(unwrap(await registry.add_supplier(body, actor)))


@router.get("/{supplier_id}", response_model=SupplierResponse, summary="Get a supplier")
async def get_supplier(supplier_id: str, registry: SupplierRegistry = Depends(get_supplier_registry)):
    return SupplierResponse.from_domain(unwrap(await registry.find_supplier(supplier_id)))


@router.patch(
    "/{supplier_id}",
    response_model=SupplierResponse,
    summary="Edit a supplier",
    description="A new `sla_hours` applies to tickets opened afterwards; existing deadlines stay."
)
async def update_supplier(
    supplier_id: str,
    body: SupplierUpdateDTO,
    actor: Actor = Depends(get_actor),
    registry: SupplierRegistry = Depends(get_supplier_registry)
):
    return SupplierResponse.from_domain(unwrap(await registry.update_supplier(supplier_id, body)))


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a supplier")
async def delete_supplier(
    supplier_id: str,
    actor: Actor = Depends(get_actor),
    registry: SupplierRegistry = Depends(get_supplier_registry)
):
    unwrap(await registry.delete_supplier(supplier_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
