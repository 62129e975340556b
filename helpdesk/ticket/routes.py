# helpdesk/ticket/routes.py
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from helpdesk.core.errors import TicketError
from helpdesk.ticket.schemas import (
    TicketCreate,
    TicketCreateResponse,
    TicketListResponse,
    TicketStatusUpdate,
    TicketUpdateResponse,
)
from helpdesk.ticket import services as ticket_service
from helpdesk.ticket.store import TicketStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/support", tags=["Support"])


def get_store(request: Request) -> TicketStore:
    return request.app.state.ticket_store


def _list_failure(status_code: int, message: str) -> JSONResponse:
    body = TicketListResponse(success=False, tickets=[], error=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


@router.get("", response_model=TicketListResponse, response_model_exclude_none=True)
async def list_all(store: TicketStore = Depends(get_store)):
    try:
        tickets = await ticket_service.get_all_tickets(store)
    except TicketError as e:
        return _list_failure(e.status_code, e.message)
    except Exception:
        logger.exception("Listing tickets failed")
        return _list_failure(500, "Internal server error")
    return TicketListResponse(success=True, tickets=tickets)


@router.patch("", response_model=TicketUpdateResponse, response_model_exclude_none=True)
async def update_status(payload: TicketStatusUpdate, store: TicketStore = Depends(get_store)):
    ticket = await ticket_service.update_ticket_status(store, payload)
    return TicketUpdateResponse(success=True, message="Ticket updated successfully", ticket=ticket)


@router.post("", response_model=TicketCreateResponse, response_model_exclude_none=True, status_code=201)
async def create(payload: TicketCreate, store: TicketStore = Depends(get_store)):
    ticket = await ticket_service.create_ticket(store, payload)
    return TicketCreateResponse(success=True, message="Ticket created successfully", ticket=ticket)
