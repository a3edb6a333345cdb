"""
Tickets Service

Ties the ticket repository to the query cache and the toast notifier.

- tickets_data(): cached combined read (tickets + projects + profiles)
- create / update_status / escalate: mutations that invalidate the
  cached read and emit a toast on success, and emit an error toast
  (without invalidating) on failure
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..core.errors import describe_error
from ..core.models import NewTicket
from ..domains.tickets.constants import (
    MSG_CLOSED,
    MSG_CREATE_FAILED,
    MSG_CREATED,
    MSG_ESCALATE_FAILED,
    MSG_ESCALATED,
    MSG_LOAD_FAILED,
    MSG_RESOLVED,
    MSG_UPDATE_FAILED,
    MSG_UPDATED,
    TICKETS_QUERY_KEY,
)
from ..infrastructure.cache import QueryCache, QueryState
from ..repositories import UNSET, TicketRepository
from .mutations import Mutation
from .notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class StatusUpdate:
    """Input for the status mutation. UNSET timestamps are left untouched."""
    ticket_id: str
    status: str
    resolved_at: Any = UNSET
    closed_at: Any = UNSET


def status_success_message(status: str) -> str:
    """Toast text for a successful status change."""
    if status == "resolved":
        return MSG_RESOLVED
    if status == "closed":
        return MSG_CLOSED
    return MSG_UPDATED


class TicketsService:
    """
    Service for reading and writing tickets through the cache.

    Usage:
        service = TicketsService(repository, cache, notifier)

        state = await service.tickets_data()
        await service.create.mutate(new_ticket)
        await service.update_status.mutate(StatusUpdate("id", "resolved", resolved_at=now))
        await service.escalate.mutate("id")
    """

    def __init__(
        self,
        repository: TicketRepository,
        cache: QueryCache,
        notifier: Notifier,
    ):
        self.repository = repository
        self.cache = cache
        self.notifier = notifier

        self.create: Mutation[NewTicket] = Mutation(
            "create_ticket",
            self.repository.create_ticket,
            on_success=lambda _, __: self._succeeded(MSG_CREATED),
            on_error=lambda e, _: self._failed(e, MSG_CREATE_FAILED),
        )
        self.update_status: Mutation[StatusUpdate] = Mutation(
            "update_ticket_status",
            self._update_status,
            on_success=lambda _, update: self._succeeded(status_success_message(update.status)),
            on_error=lambda e, _: self._failed(e, MSG_UPDATE_FAILED),
        )
        self.escalate: Mutation[str] = Mutation(
            "escalate_ticket",
            self.repository.escalate_ticket,
            on_success=lambda _, __: self._succeeded(MSG_ESCALATED),
            on_error=lambda e, _: self._failed(e, MSG_ESCALATE_FAILED),
        )

    async def tickets_data(self) -> QueryState:
        """
        Get the cached tickets query, refetching when stale.

        A failed read leaves any previous data in place; the failure is
        reported through the returned state's `error`.
        """
        try:
            await self.cache.fetch(TICKETS_QUERY_KEY, self.repository.fetch_tickets_data)
        except Exception as e:
            logger.warning(f"Serving cached tickets after failed refresh: {e}")
        return self.cache.get_state(TICKETS_QUERY_KEY)

    def report_query_error(self, key: str, error: BaseException) -> None:
        """Cache error hook: surface failed reads as toasts."""
        if key == TICKETS_QUERY_KEY:
            self.notifier.error(describe_error(error) or MSG_LOAD_FAILED)

    async def _update_status(self, update: StatusUpdate) -> None:
        await self.repository.update_ticket_status(
            update.ticket_id,
            update.status,
            resolved_at=update.resolved_at,
            closed_at=update.closed_at,
        )

    def _succeeded(self, message: str) -> None:
        self.cache.invalidate(TICKETS_QUERY_KEY)
        self.notifier.success(message)

    def _failed(self, error: Exception, fallback: str) -> None:
        self.notifier.error(describe_error(error) or fallback)


def build_tickets_service(
    repository: TicketRepository,
    notifier: Notifier,
    stale_time: float = 30.0,
    cache: Optional[QueryCache] = None,
) -> TicketsService:
    """Create a service whose cache reports failed reads to the notifier."""
    if cache is None:
        cache = QueryCache(stale_time=stale_time)
    service = TicketsService(repository, cache, notifier)
    cache.set_error_handler(service.report_query_error)
    return service
