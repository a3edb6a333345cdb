# src/ticket_panel/repositories/__init__.py
"""
Repository Layer - Ports and Adapters Pattern

Keeps the data access contract separate from the Supabase client so the
service layer and tests can swap in another adapter.

Usage:
    from ticket_panel.repositories import get_ticket_repository

    repo = get_ticket_repository()
    data = await repo.fetch_tickets_data()
"""

from .tickets import (
    UNSET,
    SupabaseTicketRepository,
    TicketRepository,
    build_status_update,
    join_tickets,
)


def get_ticket_repository(client=None) -> TicketRepository:
    """Get the ticket repository (Supabase-backed)."""
    return SupabaseTicketRepository(client=client)


__all__ = [
    "UNSET",
    "TicketRepository",
    "SupabaseTicketRepository",
    "build_status_update",
    "join_tickets",
    "get_ticket_repository",
]
