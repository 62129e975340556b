# helpdesk/ticket/sheet_store.py
"""
Ticket store backed by the support spreadsheet's web-app script.

Wire contract of the script:
- GET  <url>?action=getTickets -> {"tickets": [<row keyed by sheet header>, ...]}
- POST <url> {"action": "updateTicket", ticketId, status, approvedBy, approvedAt, remarks}
- POST <url> {"action": "createTicket", "ticket": <row keyed by sheet header>}

The script answers with a redirect to the actual content, so redirects are
followed. Any reply carrying ``success: false`` is treated as a failure.
"""
import logging
from typing import Any

import httpx

from helpdesk.core.clock import utc_now_iso
from helpdesk.core.errors import StoreUnavailable, TicketNotFound
from helpdesk.ticket.mapping import normalize_record, to_external_record
from helpdesk.ticket.schemas import Ticket, TicketCreate, TicketStatus
from helpdesk.ticket.store import TicketStore, generate_ticket_id

logger = logging.getLogger(__name__)


class SheetTicketStore(TicketStore):
    def __init__(
        self,
        script_url: str | None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.script_url = script_url
        self.timeout = timeout
        self._http = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def _call(self, method: str, **kwargs) -> dict[str, Any]:
        """Send one request to the script and return its decoded JSON object."""
        if not self.script_url:
            raise StoreUnavailable("SHEET_SCRIPT_URL is not configured")

        try:
            response = await self._http.request(method, self.script_url, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Ticket sheet request failed: {e}")
            raise StoreUnavailable(f"Ticket sheet request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Ticket sheet returned a non-JSON response: {e}")
            raise StoreUnavailable("Ticket sheet returned a non-JSON response") from e

        if not isinstance(data, dict):
            raise StoreUnavailable("Ticket sheet returned an unexpected payload")
        return data

    @staticmethod
    def _raise_for_failure(data: dict[str, Any], ticket_id: str | None = None) -> None:
        if data.get("success") is not False:
            return
        error = str(data.get("error") or data.get("message") or "Ticket sheet reported a failure")
        if ticket_id and "not found" in error.lower():
            raise TicketNotFound(ticket_id)
        raise StoreUnavailable(error)

    async def list_tickets(self) -> list[Ticket]:
        data = await self._call("GET", params={"action": "getTickets"})
        self._raise_for_failure(data)
        rows = data.get("tickets")
        if not isinstance(rows, list):
            raise StoreUnavailable("Ticket sheet response is missing the ticket list")
        return [normalize_record(row) for row in rows]

    async def update_ticket_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        approved_by: str | None = None,
        remarks: str | None = None,
    ) -> Ticket:
        # Unknown ids never reach the script.
        current = next((t for t in await self.list_tickets() if t.ticket_id == ticket_id), None)
        if current is None:
            raise TicketNotFound(ticket_id)

        approved_at = utc_now_iso()
        payload = {
            "action": "updateTicket",
            "ticketId": ticket_id,
            "status": status.value,
            "approvedBy": approved_by,
            "approvedAt": approved_at,
            "remarks": remarks,
        }
        # Absent keys leave the sheet cells untouched.
        data = await self._call("POST", json={k: v for k, v in payload.items() if v is not None})
        self._raise_for_failure(data, ticket_id)

        if isinstance(data.get("ticket"), dict):
            return normalize_record(data["ticket"])
        changes = {"status": status, "approved_at": approved_at}
        if approved_by:
            changes["approved_by"] = approved_by
        return current.model_copy(update=changes)

    async def create_ticket(self, payload: TicketCreate) -> Ticket:
        ticket = Ticket(
            ticket_id=generate_ticket_id(),
            timestamp=utc_now_iso(),
            status=TicketStatus.OPEN,
            **payload.model_dump(),
        )
        data = await self._call(
            "POST",
            json={"action": "createTicket", "ticket": to_external_record(ticket)},
        )
        self._raise_for_failure(data)
        if isinstance(data.get("ticket"), dict):
            return normalize_record(data["ticket"])
        return ticket

    async def close(self) -> None:
        await self._http.aclose()
