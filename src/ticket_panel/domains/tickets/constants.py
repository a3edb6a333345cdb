# src/ticket_panel/domains/tickets/constants.py
"""
Tickets Domain Constants
"""

# Cache key for the combined tickets/projects/profiles query
TICKETS_QUERY_KEY = "tickets-data"

# Ticket statuses
TICKET_STATUSES = ["wip", "pending", "resolved", "closed"]

# Status filter values accepted by the list view
STATUS_FILTERS = ["all"] + TICKET_STATUSES

# Priority levels
PRIORITIES = ["low", "medium", "high"]
DEFAULT_PRIORITY = "medium"

# Forward-only transitions exposed to users
STATUS_TRANSITIONS = {
    "wip": ["resolved", "closed"],
    "pending": ["resolved", "closed"],
    "resolved": ["closed"],
    "closed": [],
}

STATUS_CONFIG = {
    "wip": {"label": "Work In Progress", "variant": "status-wip"},
    "pending": {"label": "Pending", "variant": "status-pending"},
    "resolved": {"label": "Resolved", "variant": "status-resolved"},
    "closed": {"label": "Closed", "variant": "secondary"},
}

PRIORITY_CONFIG = {
    "low": {"label": "Low", "variant": "priority-low"},
    "medium": {"label": "Medium", "variant": "priority-medium"},
    "high": {"label": "High", "variant": "priority-high"},
}

STATUS_FILTER_LABELS = {
    "all": "All Status",
    "wip": "Work In Progress",
    "pending": "Pending",
    "resolved": "Resolved",
    "closed": "Closed",
}

# Toast messages
MSG_CREATED = "Ticket created successfully"
MSG_RESOLVED = "Ticket marked as resolved"
MSG_CLOSED = "Ticket closed"
MSG_UPDATED = "Ticket updated"
MSG_ESCALATED = "Ticket escalated to Code Red"

MSG_CREATE_FAILED = "Failed to create ticket"
MSG_UPDATE_FAILED = "Failed to update ticket"
MSG_ESCALATE_FAILED = "Failed to escalate ticket"
MSG_LOAD_FAILED = "Failed to load tickets"

SHORT_ID_LENGTH = 8
