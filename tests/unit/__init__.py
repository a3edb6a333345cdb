# tests/unit/__init__.py
"""
Unit tests for the ticket panel.

Unit tests exercise repositories, the query cache, services and view state
against the in-memory Supabase mock from conftest.
"""
