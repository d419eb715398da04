"""
Ticket Controllers (API Routes)
===============================

FastAPI routes for the ticket lifecycle.

Controllers are thin - they delegate to ``TicketLifecycleService`` and
translate its results into HTTP responses.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Request, Response, status

from ticketdesk.core import Actor
from ticketdesk.infrastructure.container import ServiceContainer
from ticketdesk.shared.api.dependencies import get_actor, get_container, raise_for_outcome, unwrap
from ticketdesk.shared.infrastructure.logging import get_context_logger, log_latency
from ticketdesk.tickets.application import (
    InteractionCreateDTO,
    InteractionResponse,
    SLAClassificationResponse,
    StatusChangeDTO,
    StatusChangeResponse,
    TicketCreateDTO,
    TicketLifecycleService,
    TicketResponse,
    TicketSummaryResponse,
)

router = APIRouter(prefix="/tickets", tags=["Tickets"])


# ========== Example payloads for Swagger ==========

TICKET_CREATE_EXAMPLE = {
    "title": "Link down at Central Station",
    "description": "Main fibre link dropped at 08:10, validators offline.",
    "supplier_id": "8a7c2b0e-3f4d-4c1a-9e55-0c6a1d2b7f10",
    "type": "internet-down",
    "priority": "critical",
    "unit": "Central Station",
    "external_protocol": "CARRIER-55821",
}


# ========== Dependencies ==========

def get_ticket_service(container: ServiceContainer = Depends(get_container)) -> TicketLifecycleService:
    return container.tickets


def _to_response(service: TicketLifecycleService, ticket) -> TicketResponse:
    return TicketResponse.from_domain(ticket, service.classify(ticket))


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a ticket",
    description="""
    Open a ticket in status `open`.

    The SLA deadline is fixed now: creation time plus the supplier's
    `sla_hours` (24 when the supplier is unknown). Owner fields default
    to the caller from the `X-Actor-*` headers.
    """,
    openapi_extra={"requestBody": {"content": {"application/json": {"example": TICKET_CREATE_EXAMPLE}}}}
)
async def create_ticket(
    body: TicketCreateDTO,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    ticket = unwrap(await service.create_ticket(body, actor))
    return _to_response(service, ticket)


@router.get("", response_model=List[TicketResponse], summary="List tickets, newest first")
async def list_tickets(
    request: Request,
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    with log_latency(logger, "list_tickets"):
        tickets = unwrap(await service.list_tickets())
    return [_to_response(service, t) for t in tickets]


@router.get("/summary", response_model=TicketSummaryResponse, summary="Dashboard numbers")
async def get_summary(service: TicketLifecycleService = Depends(get_ticket_service)):
    return unwrap(await service.summarize())


@router.get("/by-asset/{asset_id}", response_model=List[TicketResponse], summary="Tickets for an asset")
async def list_tickets_by_asset(
    asset_id: str,
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    tickets = unwrap(await service.list_tickets_by_asset(asset_id))
    return [_to_response(service, t) for t in tickets]


@router.get("/{ticket_id}", response_model=TicketResponse, summary="Get a ticket")
async def get_ticket(ticket_id: str, service: TicketLifecycleService = Depends(get_ticket_service)):
    ticket = unwrap(await service.get_ticket(ticket_id))
    return _to_response(service, ticket)


@router.patch(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Edit a ticket",
    description="""
    Partial edit. `id`, `created_at` and `sla_deadline` are ignored if sent;
    `status` only changes through `POST /tickets/{id}/status`.
    Changing `supplier_id` keeps the existing deadline.
    """
)
async def update_ticket(
    ticket_id: str,
    body: Dict[str, Any] = Body(...),
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    ticket = unwrap(await service.update_ticket(ticket_id, body, actor))
    return _to_response(service, ticket)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a ticket")
async def delete_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    unwrap(await service.delete_ticket(ticket_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{ticket_id}/status",
    response_model=StatusChangeResponse,
    summary="Change ticket status",
    description="""
    Move the ticket to a new status and record a `status-change` entry.

    - `409` when the ticket already has that status (nothing is written)
    - `audit: "failed"` when the status changed but its timeline entry
      could not be stored
    """
)
async def change_status(
    ticket_id: str,
    body: StatusChangeDTO,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    result = await service.change_status(ticket_id, body.status, actor)
    raise_for_outcome(result.status)
    return StatusChangeResponse(
        ticket=_to_response(service, result.value),
        audit=result.audit.value,
        audit_error=result.audit_error,
    )


@router.post(
    "/{ticket_id}/interactions",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a timeline entry"
)
async def add_interaction(
    ticket_id: str,
    body: InteractionCreateDTO,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    ticket = unwrap(await service.add_interaction(ticket_id, body, actor))
    return _to_response(service, ticket)


@router.get(
    "/{ticket_id}/interactions",
    response_model=List[InteractionResponse],
    summary="Timeline, most recent first"
)
async def get_timeline(ticket_id: str, service: TicketLifecycleService = Depends(get_ticket_service)):
    return [InteractionResponse.from_domain(i) for i in unwrap(await service.timeline(ticket_id))]


@router.post(
    "/{ticket_id}/duplicate",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate a ticket"
)
async def duplicate_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_actor),
    service: TicketLifecycleService = Depends(get_ticket_service)
):
    ticket = unwrap(await service.duplicate_ticket(ticket_id, actor))
    return _to_response(service, ticket)


@router.get("/{ticket_id}/sla", response_model=SLAClassificationResponse, summary="SLA classification")
async def get_ticket_sla(ticket_id: str, service: TicketLifecycleService = Depends(get_ticket_service)):
    ticket = unwrap(await service.get_ticket(ticket_id))
    return SLAClassificationResponse.from_domain(service.classify(ticket))
