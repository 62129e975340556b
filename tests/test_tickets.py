# tests/test_tickets.py
import pytest
from fastapi.testclient import TestClient

from helpdesk.main import create_app
from helpdesk.ticket.store import InMemoryTicketStore

URL = "/api/admin/support"


def _by_id(response, ticket_id):
    return next(t for t in response.json()["tickets"] if t["ticketId"] == ticket_id)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_list_returns_envelope(client):
    r = client.get(URL)
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert {t["ticketId"] for t in data["tickets"]} == {"DEMO-001", "DEMO-002", "DEMO-003"}


def test_list_uses_camel_case_and_empty_strings(client):
    ticket = _by_id(client.get(URL), "DEMO-001")
    assert ticket["requestType"] == "IT Admin / Data Correction Requests"
    assert ticket["status"] == "Open"
    assert ticket["approvedBy"] == ""
    assert ticket["attachmentLinks"] == ""


def test_list_is_idempotent(client):
    assert client.get(URL).json() == client.get(URL).json()


def test_update_status_scenario(client):
    r = client.patch(URL, json={"ticketId": "DEMO-001", "status": "In Progress", "approvedBy": "Admin User"})
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["ticket"]["status"] == "In Progress"
    assert data["ticket"]["approvedBy"] == "Admin User"
    assert data["ticket"]["approvedAt"]

    listed = _by_id(client.get(URL), "DEMO-001")
    assert listed == data["ticket"]


@pytest.mark.parametrize("status", ["Open", "In Progress", "Done"])
def test_update_restamps_approved_at(client, status):
    before = _by_id(client.get(URL), "DEMO-002")["approvedAt"]
    r = client.patch(URL, json={"ticketId": "DEMO-002", "status": status})
    assert r.status_code == 200

    after = _by_id(client.get(URL), "DEMO-002")
    assert after["status"] == status
    assert after["approvedAt"] > before


def test_same_status_still_restamps(client):
    first = client.patch(URL, json={"ticketId": "DEMO-001", "status": "Open"}).json()["ticket"]
    second = client.patch(URL, json={"ticketId": "DEMO-001", "status": "Open"}).json()["ticket"]
    assert second["status"] == "Open"
    assert second["approvedAt"] > first["approvedAt"]


def test_approved_by_kept_when_not_supplied(client):
    r = client.patch(URL, json={"ticketId": "DEMO-002", "status": "Done"})
    assert r.json()["ticket"]["approvedBy"] == "Admin User"


def test_done_ticket_can_be_reopened(client):
    client.patch(URL, json={"ticketId": "DEMO-003", "status": "Done"})
    r = client.patch(URL, json={"ticketId": "DEMO-003", "status": "Open"})
    assert r.json()["ticket"]["status"] == "Open"


def test_update_not_found(client):
    before = client.get(URL).json()
    r = client.patch(URL, json={"ticketId": "NOPE", "status": "Done"})
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Ticket not found"}
    assert client.get(URL).json() == before


@pytest.mark.parametrize(
    "body",
    [
        {"status": "Done"},
        {"ticketId": "DEMO-001"},
        {"ticketId": "", "status": "Done"},
        {},
    ],
)
def test_update_missing_fields_is_400(client, body):
    before = client.get(URL).json()
    r = client.patch(URL, json=body)
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "ticketId and status are required"}
    assert client.get(URL).json() == before


def test_update_unknown_status_is_400(client):
    r = client.patch(URL, json={"ticketId": "DEMO-001", "status": "Closed"})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "status must be one of" in r.json()["error"]


def test_update_non_object_body_is_400(client):
    r = client.patch(URL, content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_list_store_unreachable(client, store):
    store.reachable = False
    r = client.get(URL)
    assert r.status_code == 500
    assert r.json() == {"success": False, "tickets": [], "error": "Ticket store unreachable"}


def test_update_store_unreachable(client, store):
    store.reachable = False
    r = client.patch(URL, json={"ticketId": "DEMO-001", "status": "Done"})
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Ticket store unreachable"}


def test_create_ticket_defaults(client):
    r = client.post(URL, json={
        "requestType": "Bug Report",
        "summary": "Login page spins forever",
        "description": "Spinner never stops after submitting credentials.",
        "priority": "High",
    })
    assert r.status_code == 201
    ticket = r.json()["ticket"]
    assert ticket["ticketId"].startswith("TKT-")
    assert ticket["status"] == "Open"
    assert ticket["timestamp"]

    assert _by_id(client.get(URL), ticket["ticketId"])["summary"] == "Login page spins forever"


def test_create_ids_are_unique(client):
    body = {"requestType": "New Feature Request", "summary": "S", "description": "D"}
    ids = {client.post(URL, json=body).json()["ticket"]["ticketId"] for _ in range(5)}
    assert len(ids) == 5


def test_create_validation_errors(client):
    r1 = client.post(URL, json={"summary": "no type", "description": "D"})
    assert r1.status_code == 400
    assert r1.json()["success"] is False

    r2 = client.post(URL, json={"requestType": "Bug Report", "summary": "", "description": ""})
    assert r2.status_code == 400

    r3 = client.post(URL, json={"requestType": "Complaint", "summary": "S", "description": "D"})
    assert r3.status_code == 400


class CrashingStore(InMemoryTicketStore):
    async def list_tickets(self):
        raise RuntimeError("boom")

    async def update_ticket_status(self, *args, **kwargs):
        raise RuntimeError("boom")


@pytest.fixture
def crashing_client(settings):
    return TestClient(create_app(settings=settings, store=CrashingStore()), raise_server_exceptions=False)


def test_list_unexpected_failure_keeps_envelope(crashing_client):
    r = crashing_client.get(URL)
    assert r.status_code == 500
    assert r.json() == {"success": False, "tickets": [], "error": "Internal server error"}


def test_update_unexpected_failure_keeps_envelope(crashing_client):
    r = crashing_client.patch(URL, json={"ticketId": "DEMO-001", "status": "Done"})
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"success": False, "error": "Internal server error"}
