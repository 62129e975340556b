# helpdesk/core/errors.py

class TicketError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(TicketError):
    """Request is missing required fields or carries values outside the enums."""

    status_code = 400


class TicketNotFound(TicketError):
    status_code = 404

    def __init__(self, ticket_id: str):
        super().__init__("Ticket not found")
        self.ticket_id = ticket_id


class StoreUnavailable(TicketError):
    """Backing store could not be reached or returned malformed data."""

    status_code = 500
