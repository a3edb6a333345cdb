# src/ticket_panel/domains/tickets/api.py
"""
Ticket Panel API Routes

- GET  /tickets                  - view model (JSON) for the list
- GET  /tickets/page             - the panel rendered as HTML
- POST /tickets                  - create a ticket from the dialog draft
- POST /tickets/{id}/resolve     - quick action
- POST /tickets/{id}/close       - quick action
- POST /tickets/{id}/escalate    - quick action
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from ...auth import AuthContext, get_auth_context
from ...config import get_config
from ...repositories import get_ticket_repository
from ...services.notifications import ToastNotifier
from ...services.tickets import TicketsService, build_tickets_service
from .constants import DEFAULT_PRIORITY
from .panel import TicketPanel
from .view_state import DraftTicket, TicketListState, can_submit

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix="/tickets", tags=["tickets"])

_notifier: Optional[ToastNotifier] = None
_service: Optional[TicketsService] = None


def get_notifier() -> ToastNotifier:
    """Get or create the toast notifier singleton."""
    global _notifier
    if _notifier is None:
        _notifier = ToastNotifier(limit=get_config().notification_limit)
    return _notifier


def get_tickets_service() -> TicketsService:
    """Get or create the tickets service singleton."""
    global _service
    if _service is None:
        _service = build_tickets_service(
            get_ticket_repository(),
            get_notifier(),
            stale_time=get_config().cache.stale_time,
        )
    return _service


# =============================================================================
# REQUEST MODELS
# =============================================================================

class TicketDraftRequest(BaseModel):
    """Create dialog fields as submitted."""
    title: str = ""
    description: str = ""
    project_id: str = ""
    priority: str = DEFAULT_PRIORITY
    assigned_to: str = ""
    due_date: str = ""

    def to_draft(self) -> DraftTicket:
        return DraftTicket(
            title=self.title,
            description=self.description,
            project_id=self.project_id,
            priority=self.priority,
            assigned_to=self.assigned_to,
            due_date=self.due_date,
        )


# =============================================================================
# LIST
# =============================================================================

@router.get("")
async def list_tickets(
    search: str = Query("", description="Substring of title or id"),
    status: str = Query("all", description="all, wip, pending, resolved or closed"),
    service: TicketsService = Depends(get_tickets_service),
    auth: AuthContext = Depends(get_auth_context),
):
    """View model for the ticket list."""
    panel = TicketPanel(service, auth, TicketListState(search_query=search))
    try:
        panel.set_status_filter(status)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    return JSONResponse(await panel.render())


@router.get("/page", response_class=HTMLResponse)
async def tickets_page(
    request: Request,
    search: str = Query(""),
    status: str = Query("all"),
    service: TicketsService = Depends(get_tickets_service),
    auth: AuthContext = Depends(get_auth_context),
):
    """The ticket panel as an HTML page."""
    panel = TicketPanel(service, auth, TicketListState(search_query=search))
    try:
        panel.set_status_filter(status)
    except ValueError:
        panel.set_status_filter("all")

    view = await panel.render()
    return templates.TemplateResponse(request, "tickets.html", {"view": view})


# =============================================================================
# CREATE
# =============================================================================

@router.post("")
async def create_ticket(
    body: TicketDraftRequest,
    service: TicketsService = Depends(get_tickets_service),
    auth: AuthContext = Depends(get_auth_context),
):
    """Create a ticket from the dialog draft (administrators only)."""
    state = TicketListState(dialog_open=True, draft=body.to_draft())
    panel = TicketPanel(service, auth, state)

    if not auth.is_admin:
        return JSONResponse({"error": "Only administrators can create tickets"}, status_code=403)

    if not can_submit(state.draft):
        return JSONResponse({
            "error": "title and project_id are required",
            "dialog": {"open": True, "draft": state.draft.to_dict()},
        }, status_code=400)

    if service.create.is_pending:
        return JSONResponse({"error": "A ticket is already being created"}, status_code=409)

    try:
        created = await panel.submit_draft()
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    if not created:
        return JSONResponse({
            "error": panel.last_error or "Failed to create ticket",
            "dialog": {"open": True, "draft": state.draft.to_dict()},
        }, status_code=502)

    return JSONResponse({
        "status": "ok",
        "dialog": {"open": state.dialog_open, "draft": state.draft.to_dict()},
    }, status_code=201)


# =============================================================================
# QUICK ACTIONS
# =============================================================================

async def _run_action(panel: TicketPanel, action: str, ticket_id: str) -> JSONResponse:
    handler = getattr(panel, action)
    try:
        done = await handler(ticket_id)
    except PermissionError as e:
        return JSONResponse({"error": str(e)}, status_code=403)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=409)

    if not done:
        if panel.last_error:
            return JSONResponse({"error": panel.last_error}, status_code=502)
        return JSONResponse({"error": "Another update is in progress"}, status_code=409)

    return JSONResponse({"status": "ok", "ticket_id": ticket_id, "action": action})


@router.post("/{ticket_id}/resolve")
async def resolve_ticket(
    ticket_id: str,
    service: TicketsService = Depends(get_tickets_service),
    auth: AuthContext = Depends(get_auth_context),
):
    """Mark a ticket resolved."""
    return await _run_action(TicketPanel(service, auth), "resolve", ticket_id)


@router.post("/{ticket_id}/close")
async def close_ticket(
    ticket_id: str,
    service: TicketsService = Depends(get_tickets_service),
    auth: AuthContext = Depends(get_auth_context),
):
    """Close a ticket (from any open status)."""
    return await _run_action(TicketPanel(service, auth), "close", ticket_id)


@router.post("/{ticket_id}/escalate")
async def escalate_ticket(
    ticket_id: str,
    service: TicketsService = Depends(get_tickets_service),
    auth: AuthContext = Depends(get_auth_context),
):
    """Escalate a ticket to Code Red."""
    return await _run_action(TicketPanel(service, auth), "escalate", ticket_id)
