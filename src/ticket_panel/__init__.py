"""
Ticket Panel - support ticket tracking over a hosted Supabase store.

Lists, filters, creates and transitions tickets with role-gated actions.
"""

__version__ = "0.1.0"
