# tests/unit/test_ticket_panel.py
"""
Tests for the ticket panel event handlers against the seeded mock store.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from ticket_panel.auth import AuthContext, CurrentUser
from ticket_panel.domains.tickets.constants import TICKETS_QUERY_KEY
from ticket_panel.domains.tickets.panel import TicketPanel
from ticket_panel.services.notifications import ToastLevel

WIP_ID = "a1b2c3d4-0000-0000-0000-000000000001"
RESOLVED_ID = "b2c3d4e5-0000-0000-0000-000000000002"
CLOSED_ID = "c3d4e5f6-0000-0000-0000-000000000003"

FIXED_NOW = datetime(2024, 2, 2, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def admin_panel(service):
    return TicketPanel(service, AuthContext(is_admin=True, user=CurrentUser(id="admin-1")),
                       now=lambda: FIXED_NOW)


@pytest.fixture
def member_panel(service):
    return TicketPanel(service, AuthContext(is_admin=False, user=CurrentUser(id="user-1")),
                       now=lambda: FIXED_NOW)


def _row(store, ticket_id):
    return next(r for r in store.rows("tickets") if r["id"] == ticket_id)


# =============================================================================
# RENDER / FILTERS
# =============================================================================

class TestRender:

    @pytest.mark.asyncio
    async def test_member_sees_all_tickets_newest_first(self, member_panel):
        view = await member_panel.render()

        assert view["loading"] is False
        assert [t["id"] for t in view["tickets"]] == [RESOLVED_ID, WIP_ID, CLOSED_ID]

    @pytest.mark.asyncio
    async def test_search_and_status_filter(self, member_panel):
        member_panel.set_search_query("LOGIN")
        view = await member_panel.render()
        assert [t["id"] for t in view["tickets"]] == [WIP_ID]

        member_panel.set_search_query("")
        member_panel.set_status_filter("closed")
        view = await member_panel.render()
        assert [t["id"] for t in view["tickets"]] == [CLOSED_ID]

    def test_invalid_status_filter_keeps_previous(self, member_panel):
        member_panel.set_status_filter("resolved")
        with pytest.raises(ValueError):
            member_panel.set_status_filter("bogus")
        assert member_panel.state.status_filter == "resolved"

    @pytest.mark.asyncio
    async def test_read_failure_renders_error(self, member_panel, mock_supabase_with_data):
        mock_supabase_with_data.fail("tickets", "select", ConnectionError("network unreachable"))

        view = await member_panel.render()

        assert view["loading"] is False
        assert view["error"] == "network unreachable"
        assert view["tickets"] == []


# =============================================================================
# CREATE DIALOG
# =============================================================================

class TestCreateDialog:

    @pytest.mark.asyncio
    async def test_submit_creates_closes_and_resets(self, admin_panel, notifier, mock_supabase_with_data):
        await admin_panel.render()
        admin_panel.open_dialog()
        admin_panel.update_draft(title="Checkout fails", project_id="proj-1")

        assert await admin_panel.submit_draft() is True

        row = next(r for r in mock_supabase_with_data.rows("tickets") if r["title"] == "Checkout fails")
        assert row["priority"] == "medium"
        assert row["created_by"] == "admin-1"
        assert row["description"] is None
        assert admin_panel.state.dialog_open is False
        assert admin_panel.state.draft.title == ""
        assert [t.message for t in notifier.pending()] == ["Ticket created successfully"]

        await admin_panel.service.cache.wait_for_fetch(TICKETS_QUERY_KEY)
        view = await admin_panel.render()
        assert view["tickets"][0]["title"] == "Checkout fails"

    @pytest.mark.asyncio
    async def test_incomplete_draft_is_noop(self, admin_panel, mock_supabase_with_data):
        admin_panel.open_dialog()
        admin_panel.update_draft(title="No project")

        assert await admin_panel.submit_draft() is False
        assert mock_supabase_with_data.calls_for("insert") == []
        assert admin_panel.state.dialog_open is True

    @pytest.mark.asyncio
    async def test_failed_create_keeps_dialog_and_draft(self, admin_panel, notifier, mock_supabase_with_data):
        mock_supabase_with_data.fail("tickets", "insert", ConnectionError("network unreachable"))
        admin_panel.open_dialog()
        admin_panel.update_draft(title="Checkout fails", project_id="proj-1")

        assert await admin_panel.submit_draft() is False

        assert admin_panel.state.dialog_open is True
        assert admin_panel.state.draft.title == "Checkout fails"
        assert admin_panel.last_error == "network unreachable"
        assert [(t.level, t.message) for t in notifier.pending()] == [
            (ToastLevel.ERROR, "network unreachable"),
        ]

    @pytest.mark.asyncio
    async def test_member_cannot_create(self, member_panel):
        member_panel.update_draft(title="x", project_id="proj-1")
        with pytest.raises(PermissionError):
            await member_panel.submit_draft()

    def test_unknown_draft_field_rejected(self, admin_panel):
        with pytest.raises(ValueError):
            admin_panel.update_draft(severity="high")


# =============================================================================
# QUICK ACTIONS
# =============================================================================

class TestQuickActions:

    @pytest.mark.asyncio
    async def test_resolve_stamps_resolved_at(self, member_panel, mock_supabase_with_data, notifier):
        await member_panel.render()

        assert await member_panel.resolve(WIP_ID) is True

        row = _row(mock_supabase_with_data, WIP_ID)
        assert row["status"] == "resolved"
        assert row["resolved_at"] == FIXED_NOW.isoformat()
        assert row["closed_at"] is None
        assert [t.message for t in notifier.pending()] == ["Ticket marked as resolved"]

    @pytest.mark.asyncio
    async def test_close_open_ticket_directly(self, member_panel, mock_supabase_with_data):
        await member_panel.render()

        assert await member_panel.close(WIP_ID) is True

        row = _row(mock_supabase_with_data, WIP_ID)
        assert row["status"] == "closed"
        assert row["closed_at"] == FIXED_NOW.isoformat()
        assert row["resolved_at"] is None

    @pytest.mark.asyncio
    async def test_escalate_keeps_status(self, member_panel, mock_supabase_with_data, notifier):
        await member_panel.render()

        assert await member_panel.escalate(WIP_ID) is True

        row = _row(mock_supabase_with_data, WIP_ID)
        assert row["is_code_red"] is True
        assert row["status"] == "wip"
        assert [t.message for t in notifier.pending()] == ["Ticket escalated to Code Red"]

    @pytest.mark.asyncio
    async def test_actions_not_offered_are_rejected(self, member_panel, mock_supabase_with_data):
        await member_panel.render()

        with pytest.raises(ValueError):
            await member_panel.resolve(CLOSED_ID)
        with pytest.raises(ValueError):
            await member_panel.escalate(RESOLVED_ID)
        assert mock_supabase_with_data.calls_for("update") == []

    @pytest.mark.asyncio
    async def test_admin_cannot_run_quick_actions(self, admin_panel):
        with pytest.raises(PermissionError):
            await admin_panel.resolve(WIP_ID)

    @pytest.mark.asyncio
    async def test_failed_update_leaves_list_unchanged(self, member_panel, mock_supabase_with_data, notifier):
        await member_panel.render()
        mock_supabase_with_data.fail("tickets", "update", ConnectionError("network unreachable"))

        assert await member_panel.close(WIP_ID) is False

        assert member_panel.last_error == "network unreachable"
        assert [(t.level, t.message) for t in notifier.pending()] == [
            (ToastLevel.ERROR, "network unreachable"),
        ]
        view = await member_panel.render()
        wip = next(t for t in view["tickets"] if t["id"] == WIP_ID)
        assert wip["status"]["value"] == "wip"

    @pytest.mark.asyncio
    async def test_resolved_ticket_disappears_from_wip_filter(self, member_panel):
        member_panel.set_status_filter("wip")
        assert [t["id"] for t in (await member_panel.render())["tickets"]] == [WIP_ID]

        await member_panel.resolve(WIP_ID)
        await member_panel.service.cache.wait_for_fetch(TICKETS_QUERY_KEY)

        view = await member_panel.render()
        assert view["tickets"] == []
        assert view["empty_state"]["message"] == "Try adjusting your search or filters"

    @pytest.mark.asyncio
    async def test_handler_returns_after_list_refresh(self, member_panel):
        await member_panel.render()

        await member_panel.escalate(WIP_ID)

        state = member_panel.service.cache.get_state(TICKETS_QUERY_KEY)
        assert state.is_fetching is False
        assert not member_panel.service.cache.is_stale(TICKETS_QUERY_KEY)
        ticket = next(t for t in state.data.tickets if t.id == WIP_ID)
        assert ticket.is_code_red is True

    @pytest.mark.asyncio
    async def test_create_during_slow_refresh_is_not_masked(self, admin_panel, mock_supabase_with_data, clock):
        await admin_panel.render()
        clock.advance(30)

        render = asyncio.ensure_future(admin_panel.render())
        await asyncio.sleep(0)
        admin_panel.update_draft(title="Checkout fails", project_id="proj-1")
        assert await admin_panel.submit_draft() is True
        await render

        view = await admin_panel.render()
        assert "Checkout fails" in [t["title"] for t in view["tickets"]]
