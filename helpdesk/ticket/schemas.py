# helpdesk/ticket/schemas.py
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Priority(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class RequestType(str, Enum):
    IT_ADMIN = "IT Admin / Data Correction Requests"
    NEW_FEATURE = "New Feature Request"
    ENHANCEMENT = "Change / Enhancement Request"
    BUG_REPORT = "Bug Report"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ticket(CamelModel):
    model_config = ConfigDict(frozen=True)

    ticket_id: str = Field(..., min_length=1)
    timestamp: str = ""
    request_type: RequestType
    summary: str = ""
    description: str = ""
    exact_change: str = ""
    additional_emails: str = ""
    priority: Priority = Priority.MEDIUM
    impact: str = ""
    attachment_links: str = ""
    status: TicketStatus = TicketStatus.OPEN
    approved_by: str = ""
    approved_at: str = ""


class TicketCreate(CamelModel):
    request_type: RequestType
    summary: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM
    exact_change: str = ""
    additional_emails: str = ""
    impact: str = ""
    attachment_links: str = ""


class TicketStatusUpdate(CamelModel):
    # Required fields are checked by the service so that a missing one is
    # reported as InvalidInput rather than a schema error.
    ticket_id: str | None = None
    status: str | None = None
    approved_by: str | None = None
    remarks: str | None = None


class TicketListResponse(CamelModel):
    success: bool
    tickets: list[Ticket]
    error: str | None = None


class TicketUpdateResponse(CamelModel):
    success: bool
    message: str | None = None
    ticket: Ticket | None = None
    error: str | None = None


class TicketCreateResponse(TicketUpdateResponse):
    pass
