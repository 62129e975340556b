# helpdesk/ticket/client.py
import asyncio
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from helpdesk.ticket.schemas import (
    TicketCreate,
    TicketCreateResponse,
    TicketListResponse,
    TicketStatus,
    TicketStatusUpdate,
    TicketUpdateResponse,
)

logger = logging.getLogger(__name__)

SUPPORT_ENDPOINT = "/api/admin/support"
UNKNOWN_ERROR = "An unknown error occurred"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response


# The server may still apply an update after the client gave up on it.
class RequestTimeout(ApiError):
    def __init__(self, message: str = "Request timeout"):
        super().__init__(message, status_code=408)


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    """Prefer the server's ``error``/``message`` field over the bare status line."""
    message = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return message, None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message") or message
    return str(message), body


class TicketClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        endpoint: str = SUPPORT_ENDPOINT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.endpoint = endpoint
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "TicketClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        response_model: type[ResponseT],
        payload: dict[str, Any] | None = None,
    ) -> ResponseT:
        try:
            response = await asyncio.wait_for(
                self._http.request(method, self.endpoint, json=payload),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"{method} {self.endpoint} timed out after {self.timeout}s")
            raise RequestTimeout() from e
        except httpx.HTTPError as e:
            raise ApiError(str(e) or UNKNOWN_ERROR) from e

        if response.is_error:
            message, body = _error_message(response)
            raise ApiError(message, status_code=response.status_code, response=body)

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ApiError(
                f"Malformed response from {self.endpoint}",
                status_code=response.status_code,
            ) from e

    async def fetch_tickets(self) -> TicketListResponse:
        return await self._request("GET", TicketListResponse)

    async def update_ticket_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        approved_by: str | None = None,
        remarks: str | None = None,
    ) -> TicketUpdateResponse:
        try:
            status = TicketStatus(status)
        except ValueError as e:
            raise ApiError(f"Invalid status {status!r}") from e
        payload = TicketStatusUpdate(
            ticket_id=ticket_id,
            status=status.value,
            approved_by=approved_by,
            remarks=remarks,
        )
        return await self._request(
            "PATCH",
            TicketUpdateResponse,
            payload.model_dump(by_alias=True, exclude_none=True),
        )

    async def create_ticket(self, payload: TicketCreate) -> TicketCreateResponse:
        return await self._request(
            "POST",
            TicketCreateResponse,
            payload.model_dump(mode="json", by_alias=True),
        )
