# src/ticket_panel/domains/tickets/view_state.py
"""
Ticket List View State

UI-local state for the ticket panel and the pure functions that derive
what the panel shows from it:

- filter_tickets: search text + status filter
- ticket_actions: role-gated quick actions per ticket
- can_submit / draft_to_new_ticket: create dialog rules
- derive_view: full view model for one render
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from ...auth import AuthContext
from ...core.errors import describe_error
from ...core.models import NewTicket, Ticket, TicketsData
from ...infrastructure.cache import QueryState
from .constants import (
    DEFAULT_PRIORITY,
    PRIORITIES,
    PRIORITY_CONFIG,
    SHORT_ID_LENGTH,
    STATUS_CONFIG,
    STATUS_FILTER_LABELS,
    STATUS_FILTERS,
    STATUS_TRANSITIONS,
)

ACTION_VIEW = "view"
ACTION_RESOLVE = "resolve"
ACTION_CLOSE = "close"
ACTION_ESCALATE = "escalate"

DRAFT_FIELDS = ("title", "description", "project_id", "priority", "assigned_to", "due_date")


@dataclass
class DraftTicket:
    """Fields of the create dialog, as typed."""
    title: str = ""
    description: str = ""
    project_id: str = ""
    priority: str = DEFAULT_PRIORITY
    assigned_to: str = ""
    due_date: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in DRAFT_FIELDS}


@dataclass
class TicketListState:
    """UI-local state of the panel."""
    search_query: str = ""
    status_filter: str = "all"
    dialog_open: bool = False
    draft: DraftTicket = field(default_factory=DraftTicket)

    @property
    def has_active_filter(self) -> bool:
        return bool(self.search_query) or self.status_filter != "all"


@dataclass(frozen=True)
class PendingFlags:
    """Which mutations are in flight right now."""
    create: bool = False
    update_status: bool = False
    escalate: bool = False


@dataclass(frozen=True)
class TicketAction:
    """A quick-action button on a ticket row."""
    kind: str
    label: str
    variant: str
    disabled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "label": self.label,
            "variant": self.variant,
            "disabled": self.disabled,
        }


def validate_status_filter(value: str) -> str:
    if value not in STATUS_FILTERS:
        raise ValueError(f"Invalid status filter '{value}'. Must be one of: {STATUS_FILTERS}")
    return value


def matches_search(ticket: Ticket, search_query: str) -> bool:
    """Case-insensitive substring match on title or id."""
    needle = search_query.lower()
    return needle in ticket.title.lower() or needle in ticket.id.lower()


def filter_tickets(tickets: List[Ticket], search_query: str, status_filter: str) -> List[Ticket]:
    """Tickets matching the search text and the status filter, in order."""
    return [
        ticket for ticket in tickets
        if matches_search(ticket, search_query)
        and (status_filter == "all" or ticket.status == status_filter)
    ]


def ticket_actions(ticket: Ticket, is_admin: bool, pending: PendingFlags = PendingFlags()) -> List[TicketAction]:
    """
    Quick actions offered on a ticket row.

    Administrators only get View. Everyone else gets the forward status
    transitions for the ticket plus Escalate while it is neither escalated
    nor closed.
    """
    if is_admin:
        return [TicketAction(ACTION_VIEW, "View", "outline")]

    transitions = STATUS_TRANSITIONS.get(ticket.status, [])
    actions = []

    if "resolved" in transitions:
        actions.append(TicketAction(ACTION_RESOLVE, "Resolve", "success", pending.update_status))
    if "closed" in transitions:
        # Open tickets can be closed without resolving first
        variant = "secondary" if ticket.status == "resolved" else "outline"
        actions.append(TicketAction(ACTION_CLOSE, "Close", variant, pending.update_status))
    if not ticket.is_code_red and ticket.status != "closed":
        actions.append(TicketAction(ACTION_ESCALATE, "Escalate", "code-red", pending.escalate))

    return actions


def can_submit(draft: DraftTicket) -> bool:
    """The create action is a no-op unless a title and project are set."""
    return bool(draft.title.strip()) and bool(draft.project_id)


def draft_to_new_ticket(draft: DraftTicket, user_id: Optional[str]) -> NewTicket:
    """Insert payload for a draft; empty optional fields become None."""
    return NewTicket(
        title=draft.title,
        description=draft.description or None,
        project_id=draft.project_id,
        priority=draft.priority,
        assigned_to=draft.assigned_to or None,
        due_date=draft.due_date or None,
        created_by=user_id or "",
    )


def empty_state_message(state: TicketListState, is_admin: bool) -> str:
    if state.has_active_filter:
        return "Try adjusting your search or filters"
    if is_admin:
        return "Create a new ticket to get started"
    return "No tickets have been assigned to you yet"


def format_due_date(value: Optional[str]) -> Optional[str]:
    """Render an ISO date or timestamp as YYYY-MM-DD."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10]).isoformat()
    except ValueError:
        return value


def ticket_row(ticket: Ticket, is_admin: bool, pending: PendingFlags) -> Dict[str, Any]:
    """View model for one ticket row."""
    status = STATUS_CONFIG.get(ticket.status, {"label": ticket.status, "variant": "secondary"})
    priority = PRIORITY_CONFIG.get(ticket.priority, {"label": ticket.priority, "variant": "secondary"})
    return {
        "id": ticket.id,
        "short_id": ticket.id[:SHORT_ID_LENGTH],
        "title": ticket.title,
        "description": ticket.description or "No description",
        "project_name": ticket.project.name if ticket.project else None,
        "status": {"value": ticket.status, **status},
        "priority": {"value": ticket.priority, **priority},
        "assignee": ticket.assignee.display_name if ticket.assignee else None,
        "due_date": format_due_date(ticket.due_date),
        "is_code_red": ticket.is_code_red,
        "actions": [a.to_dict() for a in ticket_actions(ticket, is_admin, pending)],
    }


def dialog_view(state: TicketListState, data: TicketsData, pending: PendingFlags) -> Dict[str, Any]:
    """View model for the create dialog."""
    return {
        "open": state.dialog_open,
        "draft": state.draft.to_dict(),
        "projects": [{"value": p.id, "label": p.name} for p in data.projects],
        "users": [{"value": u.id, "label": u.label} for u in data.users],
        "priorities": [{"value": p, "label": PRIORITY_CONFIG[p]["label"]} for p in PRIORITIES],
        "can_submit": can_submit(state.draft),
        "submit_disabled": pending.create,
        "submit_label": "Creating..." if pending.create else "Create Ticket",
    }


def derive_view(
    state: TicketListState,
    query: QueryState,
    auth: AuthContext,
    pending: PendingFlags = PendingFlags(),
) -> Dict[str, Any]:
    """
    Build the full view model for one render.

    Pure: depends only on its arguments.
    """
    is_admin = auth.is_admin
    view: Dict[str, Any] = {
        "title": "All Tickets" if is_admin else "My Tickets",
        "subtitle": (
            "Manage and track all tickets across projects"
            if is_admin else "View and update your assigned tickets"
        ),
        "is_admin": is_admin,
        "loading": query.is_loading,
        "error": None,
        "search_query": state.search_query,
        "status_filter": state.status_filter,
        "status_filters": [{"value": v, "label": STATUS_FILTER_LABELS[v]} for v in STATUS_FILTERS],
        "tickets": [],
        "empty_state": None,
        "dialog": None,
    }

    if query.is_loading:
        return view

    data: TicketsData = query.data or TicketsData()
    if query.error is not None:
        view["error"] = describe_error(query.error)

    visible = filter_tickets(data.tickets, state.search_query, state.status_filter)
    view["tickets"] = [ticket_row(t, is_admin, pending) for t in visible]

    if not visible:
        view["empty_state"] = {
            "title": "No tickets found",
            "message": empty_state_message(state, is_admin),
        }

    if is_admin:
        view["dialog"] = dialog_view(state, data, pending)

    return view
