# helpdesk/ticket/controller.py
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from helpdesk.core.config import Settings, get_settings
from helpdesk.ticket.client import ApiError, TicketClient
from helpdesk.ticket.schemas import Ticket, TicketStatus

logger = logging.getLogger(__name__)

DEFAULT_APPROVER = "Admin User"


@dataclass(frozen=True)
class TicketViewState:
    tickets: tuple[Ticket, ...] = ()
    loading: bool = False
    refreshing: bool = False
    error: str | None = None
    updating_tickets: frozenset[str] = field(default_factory=frozenset)


Listener = Callable[[TicketViewState], None]


def _message(error: Exception, fallback: str) -> str:
    if isinstance(error, ApiError):
        return error.message or fallback
    return str(error) or fallback


class TicketViewController:
    def __init__(self, client: TicketClient, approver: str = DEFAULT_APPROVER):
        self.client = client
        self.approver = approver
        self.tickets: list[Ticket] = []
        self.loading = False
        self.error: str | None = None
        self.updating_tickets: set[str] = set()
        self._activated = False
        self._refreshes_in_flight = 0
        self._listeners: list[Listener] = []

    @property
    def refreshing(self) -> bool:
        return self._refreshes_in_flight > 0

    def snapshot(self) -> TicketViewState:
        return TicketViewState(
            tickets=tuple(self.tickets),
            loading=self.loading,
            refreshing=self.refreshing,
            error=self.error,
            updating_tickets=frozenset(self.updating_tickets),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)

    async def _fetch(self, is_refresh: bool) -> None:
        if is_refresh:
            self._refreshes_in_flight += 1
        else:
            self.loading = True
        self.error = None
        self._notify()

        try:
            response = await self.client.fetch_tickets()
            if not response.success:
                raise ApiError(response.error or "Failed to fetch tickets")
            self.tickets = list(response.tickets)
        except Exception as e:
            logger.error(f"Error fetching tickets: {e}")
            self.error = _message(e, "Failed to load tickets")
        finally:
            if is_refresh:
                self._refreshes_in_flight -= 1
            else:
                self.loading = False
            self._notify()

    async def activate(self) -> None:
        """Initial load; later calls are no-ops."""
        if self._activated:
            return
        self._activated = True
        await self._fetch(is_refresh=False)

    async def refetch(self) -> None:
        await self._fetch(is_refresh=True)

    async def update_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        approved_by: str | None = None,
    ) -> None:
        """Change one ticket's status, then reload the whole list.

        Failures are recorded in ``error`` and re-raised. The ticket id is in
        ``updating_tickets`` for the whole duration, refetch included.
        """
        self.updating_tickets.add(ticket_id)
        self.error = None
        self._notify()

        try:
            response = await self.client.update_ticket_status(
                ticket_id,
                status,
                approved_by=approved_by or self.approver,
            )
            if not response.success:
                raise ApiError(response.error or "Failed to update ticket")
            await self.refetch()
        except Exception as e:
            logger.error(f"Error updating ticket {ticket_id}: {e}")
            self.error = _message(e, "Failed to update ticket status")
            raise
        finally:
            self.updating_tickets.discard(ticket_id)
            self._notify()


def build_controller(base_url: str, settings: Settings | None = None) -> TicketViewController:
    settings = settings or get_settings()
    client = TicketClient(base_url, timeout=settings.CLIENT_TIMEOUT_SECONDS)
    return TicketViewController(client, approver=settings.DEFAULT_APPROVER)
