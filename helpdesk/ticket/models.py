# helpdesk/ticket/models.py
from sqlalchemy import Column, Integer, String, Text
from helpdesk.core.database import Base

class TicketRecord(Base):
    __tablename__ = "support_tickets"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(String(32), unique=True, index=True, nullable=False)
    timestamp = Column(String(40), nullable=False, default="")
    request_type = Column(String(64), nullable=False)
    summary = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    exact_change = Column(Text, nullable=False, default="")
    additional_emails = Column(Text, nullable=False, default="")
    priority = Column(String(16), nullable=False, default="Medium")
    impact = Column(Text, nullable=False, default="")
    attachment_links = Column(Text, nullable=False, default="")
    status = Column(String(16), nullable=False, default="Open", index=True)
    approved_by = Column(String(255), nullable=False, default="")
    approved_at = Column(String(40), nullable=False, default="")
