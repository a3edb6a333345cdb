# src/ticket_panel/core/__init__.py
"""
Core - domain entities and the error taxonomy shared by every layer.
"""

from .errors import RemoteQueryError, RemoteWriteError, TicketPanelError
from .models import (
    NewTicket,
    Profile,
    Project,
    Ticket,
    TicketAssignee,
    TicketProject,
    TicketsData,
)

__all__ = [
    "TicketPanelError",
    "RemoteQueryError",
    "RemoteWriteError",
    "Ticket",
    "TicketProject",
    "TicketAssignee",
    "Project",
    "Profile",
    "TicketsData",
    "NewTicket",
]
