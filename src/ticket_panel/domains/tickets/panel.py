# src/ticket_panel/domains/tickets/panel.py
"""
Ticket Panel

Event handlers for the ticket list: search, filter, the create dialog and
the quick actions. State lives in a TicketListState; rendering goes through
derive_view() so the handlers never build view output themselves.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ...auth import AuthContext
from ...core.errors import RemoteWriteError
from ...core.models import Ticket, TicketsData
from ...services.mutations import Mutation
from ...services.tickets import StatusUpdate, TicketsService
from .constants import TICKETS_QUERY_KEY
from .view_state import (
    ACTION_CLOSE,
    ACTION_ESCALATE,
    ACTION_RESOLVE,
    DRAFT_FIELDS,
    DraftTicket,
    PendingFlags,
    TicketListState,
    can_submit,
    derive_view,
    draft_to_new_ticket,
    ticket_actions,
    validate_status_filter,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TicketPanel:
    """
    Ticket list panel for one viewer.

    Usage:
        panel = TicketPanel(service, auth)
        panel.set_search_query("login")
        view = await panel.render()

        await panel.resolve(ticket_id)
    """

    def __init__(
        self,
        service: TicketsService,
        auth: AuthContext,
        state: Optional[TicketListState] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self.service = service
        self.auth = auth
        self.state = state or TicketListState()
        self._now = now
        self.last_error: Optional[str] = None

    # -------------------------------------------------------------------------
    # Local state
    # -------------------------------------------------------------------------

    def set_search_query(self, query: str) -> None:
        self.state.search_query = query

    def set_status_filter(self, status_filter: str) -> None:
        self.state.status_filter = validate_status_filter(status_filter)

    def open_dialog(self) -> None:
        self.state.dialog_open = True

    def close_dialog(self) -> None:
        self.state.dialog_open = False

    def update_draft(self, **fields: str) -> None:
        """Set draft fields by name (title, project_id, priority, ...)."""
        for name, value in fields.items():
            if name not in DRAFT_FIELDS:
                raise ValueError(f"Unknown draft field '{name}'")
            setattr(self.state.draft, name, value)

    def reset_draft(self) -> None:
        self.state.draft = DraftTicket()

    def pending_flags(self) -> PendingFlags:
        return PendingFlags(
            create=self.service.create.is_pending,
            update_status=self.service.update_status.is_pending,
            escalate=self.service.escalate.is_pending,
        )

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    async def render(self) -> dict:
        """Fetch (or reuse) the tickets query and build the view model."""
        query = await self.service.tickets_data()
        return derive_view(self.state, query, self.auth, self.pending_flags())

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def submit_draft(self) -> bool:
        """
        Create a ticket from the draft.

        Returns:
            True if the ticket was created. A draft without title or
            project, a pending create, or a failed write returns False and
            leaves the dialog open.
        """
        if not self.auth.is_admin:
            raise PermissionError("Only administrators can create tickets")

        if not can_submit(self.state.draft) or self.service.create.is_pending:
            return False

        def _reset(_result, _variables) -> None:
            self.close_dialog()
            self.reset_draft()

        new_ticket = draft_to_new_ticket(self.state.draft, self.auth.user_id)
        return await self._run(self.service.create, new_ticket, on_success=_reset)

    async def resolve(self, ticket_id: str) -> bool:
        """Mark a ticket resolved, stamping resolved_at."""
        if not self._allow(ticket_id, ACTION_RESOLVE, self.service.update_status):
            return False
        update = StatusUpdate(ticket_id, "resolved", resolved_at=self._now().isoformat())
        return await self._run(self.service.update_status, update)

    async def close(self, ticket_id: str) -> bool:
        """Close a ticket, stamping closed_at."""
        if not self._allow(ticket_id, ACTION_CLOSE, self.service.update_status):
            return False
        update = StatusUpdate(ticket_id, "closed", closed_at=self._now().isoformat())
        return await self._run(self.service.update_status, update)

    async def escalate(self, ticket_id: str) -> bool:
        """Flag a ticket as Code Red."""
        if not self._allow(ticket_id, ACTION_ESCALATE, self.service.escalate):
            return False
        return await self._run(self.service.escalate, ticket_id)

    def _allow(self, ticket_id: str, action: str, mutation: Mutation) -> bool:
        """
        Check a quick action against the role and the cached ticket.

        A pending mutation disables its buttons, so the call is dropped.
        Tickets missing from the cache are left to the store to judge.
        """
        if self.auth.is_admin:
            raise PermissionError("Administrators cannot change ticket status from the list")

        if mutation.is_pending:
            logger.debug(f"Ignoring {action} on {ticket_id}: {mutation.name} pending")
            return False

        ticket = self._cached_ticket(ticket_id)
        if ticket is not None:
            offered = {a.kind for a in ticket_actions(ticket, is_admin=False)}
            if action not in offered:
                raise ValueError(f"Cannot {action} ticket {ticket_id} in status '{ticket.status}'")
        return True

    def _cached_ticket(self, ticket_id: str) -> Optional[Ticket]:
        data: Optional[TicketsData] = self.service.cache.get_state(TICKETS_QUERY_KEY).data
        if data is None:
            return None
        return next((t for t in data.tickets if t.id == ticket_id), None)

    async def _run(self, mutation: Mutation, variables, on_success=None) -> bool:
        # The service has already shown the error toast; keep the panel usable
        self.last_error = None
        try:
            await mutation.mutate(variables, on_success=on_success)
        except RemoteWriteError as e:
            logger.warning(f"{mutation.name} failed: {e.message}")
            self.last_error = e.message
            return False

        # Settle the refetch the write triggered so the next render sees it
        await self.service.cache.wait_for_fetch(TICKETS_QUERY_KEY)
        return True
