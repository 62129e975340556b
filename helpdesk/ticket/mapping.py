# helpdesk/ticket/mapping.py
"""Translation between external ticket records and the canonical ``Ticket``.

External stores (the ticket spreadsheet in particular) key their records by
column headers that have drifted over time. ``FIELD_ALIASES`` lists, for every
canonical field, the external names accepted for it in lookup order; the first
alias is also the name written back when creating records. Empty values fall
through to the next alias, then to ``FIELD_DEFAULTS``, then to "".
"""
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeVar

from helpdesk.core.errors import StoreUnavailable
from helpdesk.ticket.schemas import Priority, RequestType, Ticket, TicketStatus

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "ticket_id": ("ID", "Id", "id", "ticketId"),
    "timestamp": ("Created On", "CreatedOn", "timestamp"),
    "request_type": ("Type of Request", "Request Type", "requestType"),
    "summary": ("Summary", "summary"),
    "description": ("Request Details", "Request", "description"),
    "exact_change": ("Exact Change Needed", "exactChange"),
    "additional_emails": ("Additional Emails", "additionalEmails"),
    "priority": ("Priority", "priority"),
    "impact": ("Impact on Work", "impact"),
    "attachment_links": ("Attachments", "attachmentLinks"),
    "status": ("Status", "status"),
    "approved_by": ("ApprovedBy", "approvedBy"),
    "approved_at": ("ApprovedAt", "approvedAt"),
}

FIELD_DEFAULTS: dict[str, str] = {
    "priority": Priority.MEDIUM.value,
    "status": TicketStatus.OPEN.value,
}

# Short forms seen in older sheet rows, keyed by folded text.
REQUEST_TYPE_ALIASES: dict[str, RequestType] = {
    "itadmindatacorrection": RequestType.IT_ADMIN,
    "itadmindatacorrectionrequest": RequestType.IT_ADMIN,
    "itadmin": RequestType.IT_ADMIN,
    "newfeature": RequestType.NEW_FEATURE,
    "featurerequest": RequestType.NEW_FEATURE,
    "changeenhancement": RequestType.ENHANCEMENT,
    "changeenhancementrequests": RequestType.ENHANCEMENT,
    "enhancement": RequestType.ENHANCEMENT,
    "bug": RequestType.BUG_REPORT,
}

E = TypeVar("E", bound=Enum)


def _fold(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value)


def lookup(raw: Mapping[str, Any], field: str) -> str:
    for name in FIELD_ALIASES[field]:
        value = _text(raw.get(name))
        if value:
            return value
    return FIELD_DEFAULTS.get(field, "")


def match_choice(enum_cls: type[E], value: str, aliases: Mapping[str, E] | None = None) -> E | None:
    """Find the enum member whose value matches ``value`` ignoring case and punctuation."""
    folded = _fold(value)
    if not folded:
        return None
    for member in enum_cls:
        if _fold(member.value) == folded or _fold(member.name) == folded:
            return member
    if aliases:
        return aliases.get(folded)
    return None


def normalize_record(raw: Mapping[str, Any]) -> Ticket:
    """Build a canonical ticket from an external record, or raise StoreUnavailable."""
    if not isinstance(raw, Mapping):
        raise StoreUnavailable(f"Ticket store returned a malformed record: {raw!r}")

    values = {field: lookup(raw, field) for field in FIELD_ALIASES}
    ticket_id = values["ticket_id"]
    if not ticket_id:
        raise StoreUnavailable("Ticket store returned a record without an ID")

    status = match_choice(TicketStatus, values["status"])
    priority = match_choice(Priority, values["priority"])
    request_type = match_choice(RequestType, values["request_type"], REQUEST_TYPE_ALIASES)
    for label, parsed in (("status", status), ("priority", priority), ("request type", request_type)):
        if parsed is None:
            field = label.replace(" ", "_")
            raise StoreUnavailable(
                f"Ticket {ticket_id} has unrecognized {label} {values[field]!r}"
            )

    values.update(status=status, priority=priority, request_type=request_type)
    return Ticket(**values)


def to_external_record(ticket: Ticket) -> dict[str, str]:
    """Inverse of ``normalize_record``: key every field by its primary external name."""
    data = ticket.model_dump(mode="json")
    return {aliases[0]: data[field] for field, aliases in FIELD_ALIASES.items()}
