"""
Toast Notification Service

Fire-and-forget success/error messages for the ticket panel.

Toasts are kept in a bounded in-process queue; the page drains it via
GET /notifications. Nothing is delivered outside the process.
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, List, Protocol

logger = logging.getLogger(__name__)


class ToastLevel(Enum):
    """Toast severities."""
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Toast:
    """A single user-facing message."""
    message: str
    level: ToastLevel = ToastLevel.SUCCESS
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "level": self.level.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }


class Notifier(Protocol):
    """Notification collaborator consumed by the service layer."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ToastNotifier:
    """
    In-process toast queue.

    Usage:
        notifier = ToastNotifier(limit=50)
        notifier.success("Ticket created successfully")
        toasts = notifier.drain()
    """

    def __init__(self, limit: int = 50):
        self._toasts: Deque[Toast] = deque(maxlen=limit)

    def success(self, message: str) -> None:
        self._push(Toast(message=message, level=ToastLevel.SUCCESS))

    def error(self, message: str) -> None:
        self._push(Toast(message=message, level=ToastLevel.ERROR))

    def _push(self, toast: Toast) -> None:
        log = logger.warning if toast.level is ToastLevel.ERROR else logger.info
        log(f"Toast [{toast.level.value}]: {toast.message}")
        self._toasts.append(toast)

    def pending(self) -> List[Toast]:
        """Toasts not yet drained, oldest first."""
        return list(self._toasts)

    def drain(self) -> List[Toast]:
        """Return and clear all pending toasts."""
        toasts = list(self._toasts)
        self._toasts.clear()
        return toasts
