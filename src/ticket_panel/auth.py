"""Auth context for the ticket panel.

Authentication itself happens upstream; the gateway forwards the signed-in
user's id and role as request headers and this module only reads them.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class CurrentUser:
    id: str


@dataclass(frozen=True)
class AuthContext:
    """Who is looking at the panel."""
    is_admin: bool = False
    user: Optional[CurrentUser] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None


def get_auth_context(request: Request) -> AuthContext:
    """FastAPI dependency: auth context from the forwarded headers."""
    user_id = request.headers.get(USER_ID_HEADER, "").strip()
    role = request.headers.get(USER_ROLE_HEADER, "").strip().lower()
    return AuthContext(
        is_admin=role == ADMIN_ROLE,
        user=CurrentUser(id=user_id) if user_id else None,
    )
