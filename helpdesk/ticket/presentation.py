# helpdesk/ticket/presentation.py
"""Row view models for the admin ticket table."""
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from helpdesk.core.clock import parse_iso
from helpdesk.ticket.controller import TicketViewState
from helpdesk.ticket.schemas import Priority, TicketStatus

EMPTY_MESSAGE = "No support tickets found."
DESCRIPTION_PREVIEW_LENGTH = 100

K = TypeVar("K", bound=Enum)
V = TypeVar("V")


@dataclass(frozen=True)
class BadgeStyle:
    variant: str
    color: str
    bg_color: str


def complete_table(enum_cls: type[K], table: Mapping[K, V]) -> dict[K, V]:
    """Return ``table`` as a dict, refusing it unless every member of ``enum_cls`` has an entry."""
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise ValueError(f"{enum_cls.__name__} table is missing {', '.join(missing)}")
    return dict(table)


PRIORITY_STYLES = complete_table(Priority, {
    Priority.CRITICAL: BadgeStyle("destructive", "text-red-700", "bg-red-50 border-red-300"),
    Priority.HIGH: BadgeStyle("warning", "text-orange-700", "bg-orange-50 border-orange-300"),
    Priority.MEDIUM: BadgeStyle("default", "text-blue-700", "bg-blue-50 border-blue-300"),
    Priority.LOW: BadgeStyle("secondary", "text-gray-700", "bg-gray-50 border-gray-300"),
})

STATUS_STYLES = complete_table(TicketStatus, {
    TicketStatus.OPEN: BadgeStyle("default", "text-blue-700", "bg-blue-50 border-blue-300"),
    TicketStatus.IN_PROGRESS: BadgeStyle("warning", "text-yellow-700", "bg-yellow-50 border-yellow-300"),
    TicketStatus.DONE: BadgeStyle("secondary", "text-green-700", "bg-green-50 border-green-300"),
})


def format_date(value: str) -> str:
    moment = parse_iso(value)
    if moment is None:
        return value
    return f"{moment:%b} {moment.day}, {moment.year}"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def split_links(links: str) -> list[str]:
    return [link.strip() for link in links.split(",") if link.strip()]


@dataclass(frozen=True)
class TicketRow:
    ticket_id: str
    request_type: str
    summary: str
    description: str
    priority: Priority
    priority_style: BadgeStyle
    status: TicketStatus
    status_style: BadgeStyle
    created: str
    attachments: list[str]
    updating: bool


def build_rows(state: TicketViewState) -> list[TicketRow]:
    return [
        TicketRow(
            ticket_id=ticket.ticket_id,
            request_type=ticket.request_type.value,
            summary=ticket.summary,
            description=truncate_text(ticket.description, DESCRIPTION_PREVIEW_LENGTH),
            priority=ticket.priority,
            priority_style=PRIORITY_STYLES[ticket.priority],
            status=ticket.status,
            status_style=STATUS_STYLES[ticket.status],
            created=format_date(ticket.timestamp),
            attachments=split_links(ticket.attachment_links),
            updating=ticket.ticket_id in state.updating_tickets,
        )
        for ticket in state.tickets
    ]
