# tests/test_client.py
import asyncio
import json

import httpx
import pytest

from helpdesk.ticket.client import ApiError, RequestTimeout, TicketClient
from helpdesk.ticket.schemas import RequestType, TicketCreate, TicketStatus

BASE_URL = "http://testserver"


def asgi_client(app, **kwargs):
    return TicketClient(BASE_URL, transport=httpx.ASGITransport(app=app), **kwargs)


def mock_client(handler, **kwargs):
    return TicketClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_fetch_tickets(app):
    async with asgi_client(app) as client:
        response = await client.fetch_tickets()
    assert response.success is True
    assert {t.ticket_id for t in response.tickets} == {"DEMO-001", "DEMO-002", "DEMO-003"}


@pytest.mark.asyncio
async def test_update_ticket_status(app):
    async with asgi_client(app) as client:
        response = await client.update_ticket_status("DEMO-001", TicketStatus.IN_PROGRESS, approved_by="Admin User")
        listed = await client.fetch_tickets()
    assert response.success is True
    assert response.ticket.status is TicketStatus.IN_PROGRESS
    assert response.ticket.approved_by == "Admin User"
    assert response.ticket in listed.tickets


@pytest.mark.asyncio
async def test_create_ticket(app):
    payload = TicketCreate(request_type=RequestType.BUG_REPORT, summary="S", description="D")
    async with asgi_client(app) as client:
        response = await client.create_ticket(payload)
    assert response.ticket.status is TicketStatus.OPEN


@pytest.mark.asyncio
async def test_not_found_uses_server_message(app):
    async with asgi_client(app) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.update_ticket_status("NOPE", TicketStatus.DONE)
    assert exc_info.value.message == "Ticket not found"
    assert exc_info.value.status_code == 404
    assert exc_info.value.response == {"success": False, "error": "Ticket not found"}


@pytest.mark.asyncio
async def test_store_unreachable_surfaces_error(app, store):
    store.reachable = False
    async with asgi_client(app) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.fetch_tickets()
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Ticket store unreachable"


@pytest.mark.asyncio
async def test_error_falls_back_to_message_then_status_line():
    async with mock_client(lambda r: httpx.Response(503, json={"message": "maintenance"})) as client:
        with pytest.raises(ApiError, match="maintenance"):
            await client.fetch_tickets()

    async with mock_client(lambda r: httpx.Response(502, text="bad gateway")) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.fetch_tickets()
    assert exc_info.value.message == "HTTP 502: Bad Gateway"


@pytest.mark.asyncio
async def test_transport_error_becomes_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(ApiError, match="connection refused") as exc_info:
            await client.fetch_tickets()
    assert not isinstance(exc_info.value, RequestTimeout)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html></html>"),
        httpx.Response(200, json={"tickets": []}),
        httpx.Response(200, json={"success": True}),
        httpx.Response(200, json={"success": True, "tickets": [{"ticketId": "A", "requestType": "Nope"}]}),
    ],
)
async def test_malformed_body_raises(response):
    async with mock_client(lambda r: response) as client:
        with pytest.raises(ApiError, match="Malformed response"):
            await client.fetch_tickets()


@pytest.mark.asyncio
async def test_slow_server_times_out():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={"success": True, "tickets": []})

    async with mock_client(handler, timeout=0.05) as client:
        with pytest.raises(RequestTimeout) as exc_info:
            await client.fetch_tickets()
    assert exc_info.value.status_code == 408
    assert exc_info.value.message == "Request timeout"


@pytest.mark.asyncio
async def test_update_payload_is_camel_case():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        return httpx.Response(200, json={"success": True})

    async with mock_client(handler) as client:
        await client.update_ticket_status("DEMO-001", TicketStatus.DONE, approved_by="Admin User")
    assert json.loads(seen["body"]) == {"ticketId": "DEMO-001", "status": "Done", "approvedBy": "Admin User"}
