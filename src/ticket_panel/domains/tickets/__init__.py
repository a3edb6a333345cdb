# src/ticket_panel/domains/tickets/__init__.py
"""
Tickets Domain - ticket list panel

This domain handles:
- List filtering by search text and status
- Role-gated quick actions (resolve, close, escalate)
- The create-ticket dialog and its draft
- HTTP routes for the panel
"""
