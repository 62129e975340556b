# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from helpdesk.core.config import Settings
from helpdesk.core.errors import StoreUnavailable
from helpdesk.main import create_app
from helpdesk.ticket.store import InMemoryTicketStore, demo_tickets


class UnreachableStore(InMemoryTicketStore):
    """Memory store whose backend can be switched off mid-test."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reachable = True

    def _check(self):
        if not self.reachable:
            raise StoreUnavailable("Ticket store unreachable")

    async def list_tickets(self):
        self._check()
        return await super().list_tickets()

    async def update_ticket_status(self, *args, **kwargs):
        self._check()
        return await super().update_ticket_status(*args, **kwargs)


@pytest.fixture
def settings():
    return Settings(_env_file=None, STORE_BACKEND="memory", LOG_LEVEL="WARNING")


@pytest.fixture
def make_store():
    def factory(**kwargs):
        return UnreachableStore(demo_tickets(), **kwargs)

    return factory


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    return TestClient(app)
