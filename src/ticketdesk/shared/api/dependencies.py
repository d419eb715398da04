"""
Shared API Dependencies
=======================

FastAPI dependencies used by every router, plus the mapping from
operation results to HTTP responses.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request, status

from ticketdesk.config import Outcome
from ticketdesk.core import Actor, OperationResult
from ticketdesk.infrastructure.container import ServiceContainer

OUTCOME_STATUS = {
    Outcome.REJECTED: status.HTTP_409_CONFLICT,
    Outcome.INVALID: 422,
    Outcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    Outcome.FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services not initialized"
        )
    return container


def get_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_name: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Actor:
    """
    Caller identity from ``X-Actor-*`` headers.

    Identity is trusted as given; only its presence is checked.
    """
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"reason": "missing_actor", "message": "X-Actor-Id header is required"}
        )
    return Actor(id=x_actor_id.strip(), name=(x_actor_name or x_actor_id).strip(), role=x_actor_role)


def raise_for_outcome(result) -> None:
    """Turn a non-success result into an ``HTTPException``."""
    if result.ok:
        return
    raise HTTPException(
        status_code=OUTCOME_STATUS[result.outcome],
        detail=result.to_dict()
    )


def unwrap(result: OperationResult):
    raise_for_outcome(result)
    return result.value
