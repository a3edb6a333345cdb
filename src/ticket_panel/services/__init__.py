"""
Services - business logic on top of the repositories.
"""

from .mutations import Mutation
from .notifications import Notifier, Toast, ToastLevel, ToastNotifier
from .tickets import StatusUpdate, TicketsService, build_tickets_service

__all__ = [
    "Mutation",
    "Notifier",
    "Toast",
    "ToastLevel",
    "ToastNotifier",
    "StatusUpdate",
    "TicketsService",
    "build_tickets_service",
]
