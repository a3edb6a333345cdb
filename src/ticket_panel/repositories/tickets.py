# src/ticket_panel/repositories/tickets.py
"""
Ticket Repository - Ports and Adapters

Port: TicketRepository (abstract interface)
Adapters: SupabaseTicketRepository
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, List

from ..core.errors import RemoteQueryError, RemoteWriteError
from ..core.models import NewTicket, Profile, Project, Ticket, TicketAssignee, TicketProject, TicketsData
from ..domains.tickets.constants import PRIORITIES, TICKET_STATUSES

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for an argument that was not passed at all."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def join_tickets(
    tickets: List[Ticket],
    projects_by_id: Dict[str, Project],
    users_by_id: Dict[str, Profile],
) -> List[Ticket]:
    """
    Attach project and assignee info to each ticket.

    References that do not resolve leave the joined field as None.
    Input tickets are not modified.
    """
    joined = []
    for ticket in tickets:
        project = projects_by_id.get(ticket.project_id)
        assignee = users_by_id.get(ticket.assigned_to) if ticket.assigned_to else None
        joined.append(replace(
            ticket,
            project=TicketProject(name=project.name) if project else None,
            assignee=TicketAssignee(
                email=assignee.email,
                full_name=assignee.full_name,
            ) if assignee else None,
        ))
    return joined


def build_status_update(
    status: str,
    resolved_at: Any = UNSET,
    closed_at: Any = UNSET,
) -> Dict[str, Any]:
    """
    Build the partial row for a status change.

    Timestamp columns are only written when passed; None is written as
    an explicit null.
    """
    if status not in TICKET_STATUSES:
        raise ValueError(f"Invalid status '{status}'. Must be one of: {TICKET_STATUSES}")

    update: Dict[str, Any] = {"status": status}
    if resolved_at is not UNSET:
        update["resolved_at"] = resolved_at
    if closed_at is not UNSET:
        update["closed_at"] = closed_at
    return update


class TicketRepository(ABC):
    """
    Ticket Repository Port - defines the interface for ticket data access.
    """

    @abstractmethod
    async def fetch_tickets_data(self) -> TicketsData:
        """Get all tickets joined with projects and profiles."""
        pass

    @abstractmethod
    async def create_ticket(self, ticket: NewTicket) -> None:
        """Insert a new ticket row."""
        pass

    @abstractmethod
    async def update_ticket_status(
        self,
        ticket_id: str,
        status: str,
        resolved_at: Any = UNSET,
        closed_at: Any = UNSET,
    ) -> None:
        """Change a ticket's status and optionally its timestamps."""
        pass

    @abstractmethod
    async def escalate_ticket(self, ticket_id: str) -> None:
        """Flag a ticket as Code Red."""
        pass


# =============================================================================
# SUPABASE ADAPTER
# =============================================================================

class SupabaseTicketRepository(TicketRepository):
    """
    Supabase adapter for ticket repository.
    """

    def __init__(self, client=None):
        self._client = client

    async def get_client(self):
        """Lazy-load Supabase client."""
        if self._client is None:
            from ..infrastructure.supabase_client import get_supabase_client
            self._client = await get_supabase_client()
        return self._client

    async def _require_client(self, error_cls):
        try:
            client = await self.get_client()
        except Exception as e:
            raise error_cls(cause=e) from e
        if client is None:
            raise error_cls("Supabase is not configured")
        return client

    async def fetch_tickets_data(self) -> TicketsData:
        """
        Fetch tickets, projects and profiles concurrently and join them.

        Raises:
            RemoteQueryError: if any of the three reads fails
        """
        client = await self._require_client(RemoteQueryError)

        try:
            tickets_res, projects_res, users_res = await asyncio.gather(
                client.table("tickets").select("*").order("created_at", desc=True).execute(),
                client.table("projects").select("id, name").execute(),
                client.table("profiles").select("id, email, full_name").execute(),
            )
        except Exception as e:
            logger.error(f"❌ Failed to fetch tickets data: {e}")
            raise RemoteQueryError(cause=e) from e

        projects = [Project.from_row(row) for row in projects_res.data or []]
        users = [Profile.from_row(row) for row in users_res.data or []]
        tickets = [Ticket.from_row(row) for row in tickets_res.data or []]

        tickets = join_tickets(
            tickets,
            {p.id: p for p in projects},
            {u.id: u for u in users},
        )

        logger.info(f"✅ Fetched {len(tickets)} tickets from Supabase")
        return TicketsData(tickets=tickets, projects=projects, users=users)

    async def create_ticket(self, ticket: NewTicket) -> None:
        """
        Insert a new ticket row.

        Raises:
            ValueError: blank title or unknown priority
            RemoteWriteError: if the insert fails
        """
        if not ticket.title.strip():
            raise ValueError("title is required")
        if not ticket.project_id:
            raise ValueError("project_id is required")
        if ticket.priority not in PRIORITIES:
            raise ValueError(f"Invalid priority '{ticket.priority}'. Must be one of: {PRIORITIES}")

        client = await self._require_client(RemoteWriteError)

        try:
            await client.table("tickets").insert(ticket.to_row()).execute()
        except Exception as e:
            logger.error(f"❌ Failed to create ticket: {e}")
            raise RemoteWriteError(cause=e) from e

        logger.info(f"Created ticket '{ticket.title}' in project {ticket.project_id}")

    async def update_ticket_status(
        self,
        ticket_id: str,
        status: str,
        resolved_at: Any = UNSET,
        closed_at: Any = UNSET,
    ) -> None:
        """
        Update a ticket's status.

        Raises:
            ValueError: unknown status
            RemoteWriteError: if the update fails
        """
        update = build_status_update(status, resolved_at, closed_at)
        await self._update(ticket_id, update)
        logger.info(f"Ticket {ticket_id} status -> {status}")

    async def escalate_ticket(self, ticket_id: str) -> None:
        """
        Set the Code Red flag on a ticket.

        Raises:
            RemoteWriteError: if the update fails
        """
        await self._update(ticket_id, {"is_code_red": True})
        logger.info(f"Ticket {ticket_id} escalated to Code Red")

    async def _update(self, ticket_id: str, update: Dict[str, Any]) -> None:
        client = await self._require_client(RemoteWriteError)

        try:
            await client.table("tickets").update(update).eq("id", ticket_id).execute()
        except Exception as e:
            logger.error(f"❌ Failed to update ticket {ticket_id}: {e}")
            raise RemoteWriteError(cause=e) from e
