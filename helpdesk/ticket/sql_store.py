# helpdesk/ticket/sql_store.py
import logging

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpdesk.core.clock import stamp_after, utc_now_iso
from helpdesk.core.database import Base, make_engine, make_session_factory, session_scope
from helpdesk.core.errors import StoreUnavailable, TicketNotFound
from helpdesk.ticket.mapping import FIELD_ALIASES
from helpdesk.ticket.models import TicketRecord
from helpdesk.ticket.schemas import Ticket, TicketCreate, TicketStatus
from helpdesk.ticket.store import TicketStore, generate_ticket_id

logger = logging.getLogger(__name__)


def _to_ticket(record: TicketRecord) -> Ticket:
    return Ticket.model_validate({field: getattr(record, field) for field in FIELD_ALIASES})


class SqlTicketStore(TicketStore):
    """Tickets in a SQL table; blocking session work runs in the thread pool."""

    def __init__(self, database_url: str):
        self.engine = make_engine(database_url)
        self._session_factory = make_session_factory(self.engine)
        Base.metadata.create_all(bind=self.engine)

    async def _run(self, fn, *args):
        try:
            return await run_in_threadpool(self._in_session, fn, *args)
        except SQLAlchemyError as e:
            logger.exception("Ticket database call failed")
            raise StoreUnavailable(f"Ticket database unavailable: {e}") from e
        except ValidationError as e:
            logger.exception("Ticket table holds a malformed row")
            raise StoreUnavailable(f"Ticket database returned malformed data: {e}") from e

    def _in_session(self, fn, *args):
        with session_scope(self._session_factory) as db:
            return fn(db, *args)

    async def list_tickets(self) -> list[Ticket]:
        return await self._run(self._list)

    async def update_ticket_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        approved_by: str | None = None,
        remarks: str | None = None,
    ) -> Ticket:
        return await self._run(self._update_status, ticket_id, status, approved_by)

    async def create_ticket(self, payload: TicketCreate) -> Ticket:
        return await self._run(self._create, payload)

    async def close(self) -> None:
        self.engine.dispose()

    @staticmethod
    def _list(db: Session) -> list[Ticket]:
        records = db.query(TicketRecord).order_by(TicketRecord.id).all()
        return [_to_ticket(r) for r in records]

    @staticmethod
    def _update_status(db: Session, ticket_id: str, status: TicketStatus, approved_by: str | None) -> Ticket:
        record = db.query(TicketRecord).filter(TicketRecord.ticket_id == ticket_id).first()
        if not record:
            raise TicketNotFound(ticket_id)
        record.status = status.value
        record.approved_at = stamp_after(record.approved_at)
        if approved_by:
            record.approved_by = approved_by
        db.commit()
        db.refresh(record)
        return _to_ticket(record)

    @staticmethod
    def _create(db: Session, payload: TicketCreate) -> Ticket:
        ticket_id = generate_ticket_id()
        while db.query(TicketRecord.id).filter(TicketRecord.ticket_id == ticket_id).first():
            ticket_id = generate_ticket_id()
        record = TicketRecord(
            ticket_id=ticket_id,
            timestamp=utc_now_iso(),
            status=TicketStatus.OPEN.value,
            **payload.model_dump(mode="json"),
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return _to_ticket(record)

    def seed(self, tickets: list[Ticket]) -> None:
        """Insert tickets as-is; used for fixtures and migrations from other stores."""
        with session_scope(self._session_factory) as db:
            for ticket in tickets:
                db.add(TicketRecord(**ticket.model_dump(mode="json")))
            db.commit()
