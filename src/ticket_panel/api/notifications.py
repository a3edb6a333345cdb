# src/ticket_panel/api/notifications.py
"""
Notification API

- GET /notifications - drain pending toasts for the page to display
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..domains.tickets.api import get_notifier
from ..services.notifications import ToastNotifier

router = APIRouter(prefix="/notifications", tags=["notifications"])


class ToastResponse(BaseModel):
    """Toast response model."""
    id: str
    level: str
    message: str
    created_at: str


class ToastListResponse(BaseModel):
    toasts: List[ToastResponse]
    count: int


@router.get("", response_model=ToastListResponse)
async def drain_notifications(notifier: ToastNotifier = Depends(get_notifier)):
    """Return pending toasts, oldest first, and clear them."""
    toasts = [ToastResponse(**t.to_dict()) for t in notifier.drain()]
    return ToastListResponse(toasts=toasts, count=len(toasts))
