# src/ticket_panel/domains/__init__.py
"""
Domain packages. Each domain owns its constants, view logic and routes.
"""
