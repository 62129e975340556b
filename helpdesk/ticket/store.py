# helpdesk/ticket/store.py
import asyncio
import logging
import uuid
from abc import ABC, abstractmethod

from helpdesk.core.clock import stamp_after, utc_now_iso
from helpdesk.core.config import Settings
from helpdesk.core.errors import TicketNotFound
from helpdesk.ticket.schemas import (
    Priority,
    RequestType,
    Ticket,
    TicketCreate,
    TicketStatus,
)

logger = logging.getLogger(__name__)


def generate_ticket_id() -> str:
    return f"TKT-{uuid.uuid4().hex[:8].upper()}"


class TicketStore(ABC):
    """Source of truth for tickets, consumed by the service layer."""

    @abstractmethod
    async def list_tickets(self) -> list[Ticket]:
        ...

    @abstractmethod
    async def update_ticket_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        approved_by: str | None = None,
        remarks: str | None = None,
    ) -> Ticket:
        """Persist ``status``, re-stamp ``approved_at`` and set ``approved_by`` when given.

        Raises TicketNotFound without writing anything when the id is unknown.
        """

    @abstractmethod
    async def create_ticket(self, payload: TicketCreate) -> Ticket:
        ...

    async def close(self) -> None:
        pass


def demo_tickets() -> list[Ticket]:
    return [
        Ticket(
            ticket_id="DEMO-001",
            timestamp="2025-01-06T09:15:00.000000Z",
            request_type=RequestType.IT_ADMIN,
            summary="Rename vessel in fleet master",
            description="Vessel 'Ocean Star' was renamed to 'Ocean Star II' last week.",
            exact_change="Fleet master > Vessel name: Ocean Star -> Ocean Star II",
            priority=Priority.HIGH,
            impact="Purchase orders show the old vessel name",
        ),
        Ticket(
            ticket_id="DEMO-002",
            timestamp="2025-01-07T14:02:00.000000Z",
            request_type=RequestType.ENHANCEMENT,
            summary="Filter requisitions by port",
            description="Add a port filter to the requisition list.",
            priority=Priority.MEDIUM,
            status=TicketStatus.IN_PROGRESS,
            approved_by="Admin User",
            approved_at="2025-01-08T10:00:00.000000Z",
        ),
        Ticket(
            ticket_id="DEMO-003",
            timestamp="2025-01-08T08:45:00.000000Z",
            request_type=RequestType.BUG_REPORT,
            summary="Export button does nothing",
            description="Clicking Export on the invoices page has no effect.",
            priority=Priority.CRITICAL,
            attachment_links="https://example.com/screenshots/export.png",
        ),
    ]


class InMemoryTicketStore(TicketStore):
    """Process-local store, one per application instance.

    ``latency`` is a minimum delay applied to every call, mimicking a slow
    remote backend.
    """

    def __init__(self, tickets: list[Ticket] | None = None, latency: float = 0.0):
        self.latency = latency
        self._tickets: dict[str, Ticket] = {t.ticket_id: t for t in tickets or []}
        self._issued_ids: set[str] = set(self._tickets)

    async def _delay(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def list_tickets(self) -> list[Ticket]:
        await self._delay()
        return list(self._tickets.values())

    async def update_ticket_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        approved_by: str | None = None,
        remarks: str | None = None,
    ) -> Ticket:
        await self._delay()
        current = self._tickets.get(ticket_id)
        if current is None:
            raise TicketNotFound(ticket_id)

        changes = {"status": status, "approved_at": stamp_after(current.approved_at)}
        if approved_by:
            changes["approved_by"] = approved_by
        updated = current.model_copy(update=changes)
        self._tickets[ticket_id] = updated
        return updated

    async def create_ticket(self, payload: TicketCreate) -> Ticket:
        await self._delay()
        ticket_id = generate_ticket_id()
        while ticket_id in self._issued_ids:
            ticket_id = generate_ticket_id()
        self._issued_ids.add(ticket_id)

        ticket = Ticket(
            ticket_id=ticket_id,
            timestamp=utc_now_iso(),
            status=TicketStatus.OPEN,
            **payload.model_dump(),
        )
        self._tickets[ticket_id] = ticket
        return ticket


def build_store(settings: Settings) -> TicketStore:
    """Construct the store selected by ``STORE_BACKEND``."""
    backend = settings.STORE_BACKEND.strip().lower()
    logger.info(f"Using {backend} ticket store")

    if backend == "memory":
        seed = demo_tickets() if settings.SEED_DEMO_DATA else []
        return InMemoryTicketStore(seed, latency=settings.STORE_LATENCY_SECONDS)
    if backend == "sheet":
        from helpdesk.ticket.sheet_store import SheetTicketStore

        return SheetTicketStore(settings.SHEET_SCRIPT_URL, timeout=settings.SHEET_TIMEOUT_SECONDS)
    if backend == "sql":
        from helpdesk.ticket.sql_store import SqlTicketStore

        return SqlTicketStore(settings.DATABASE_URL)
    raise ValueError(f"Unknown STORE_BACKEND {settings.STORE_BACKEND!r}")
