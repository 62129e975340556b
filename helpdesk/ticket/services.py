# helpdesk/ticket/services.py
import logging

from helpdesk.core.errors import InvalidInput
from helpdesk.ticket.mapping import match_choice
from helpdesk.ticket.schemas import Ticket, TicketCreate, TicketStatus, TicketStatusUpdate
from helpdesk.ticket.store import TicketStore

logger = logging.getLogger(__name__)


async def get_all_tickets(store: TicketStore) -> list[Ticket]:
    return await store.list_tickets()


def validate_status_update(payload: TicketStatusUpdate) -> tuple[str, TicketStatus]:
    ticket_id = (payload.ticket_id or "").strip()
    if not ticket_id or not payload.status:
        raise InvalidInput("ticketId and status are required")
    status = match_choice(TicketStatus, payload.status)
    if status is None:
        allowed = ", ".join(s.value for s in TicketStatus)
        raise InvalidInput(f"status must be one of: {allowed}")
    return ticket_id, status


async def update_ticket_status(store: TicketStore, payload: TicketStatusUpdate) -> Ticket:
    ticket_id, status = validate_status_update(payload)
    ticket = await store.update_ticket_status(
        ticket_id,
        status,
        approved_by=payload.approved_by or None,
        remarks=payload.remarks,
    )
    logger.info(f"Ticket {ticket_id} set to {status.value} by {ticket.approved_by or 'unknown'}")
    return ticket


async def create_ticket(store: TicketStore, payload: TicketCreate) -> Ticket:
    ticket = await store.create_ticket(payload)
    logger.info(f"Ticket {ticket.ticket_id} created ({ticket.request_type.value}, {ticket.priority.value})")
    return ticket
