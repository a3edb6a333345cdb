# src/ticket_panel/api/__init__.py
"""
Cross-domain API routes.
"""
