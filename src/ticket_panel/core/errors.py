# src/ticket_panel/core/errors.py
"""
Error taxonomy for remote store failures.

- RemoteQueryError: any read against the store failed
- RemoteWriteError: an insert or update against the store failed
"""

from typing import Optional


def describe_error(error: Optional[BaseException]) -> str:
    """
    Pull a user-facing message out of a remote client exception.

    PostgREST's APIError carries the server message on `.message`;
    transport errors only have their string form.
    """
    if error is None:
        return ""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)


class TicketPanelError(Exception):
    """Base class for ticket panel failures."""

    def __init__(self, message: str = "", cause: Optional[BaseException] = None):
        self.message = message or describe_error(cause)
        self.cause = cause
        super().__init__(self.message)


class RemoteQueryError(TicketPanelError):
    """A read request to the remote store failed."""


class RemoteWriteError(TicketPanelError):
    """A write request to the remote store failed."""
