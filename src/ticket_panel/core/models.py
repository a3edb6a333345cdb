# src/ticket_panel/core/models.py
"""
Domain entities for the ticket panel.

Rows come back from Supabase as plain dicts; these dataclasses give them
a stable shape. Ticket carries two optional joined fields (project,
assignee) filled in client-side by join_tickets().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Project:
    """Project a ticket belongs to. Read-only here."""
    id: str
    name: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Project":
        return cls(id=row["id"], name=row.get("name", ""))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Profile:
    """User profile. Read-only here."""
    id: str
    email: str
    full_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=row["id"],
            email=row.get("email", ""),
            full_name=row.get("full_name"),
        )

    @property
    def label(self) -> str:
        """Name shown in the assignee picker."""
        return self.full_name or self.email

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "full_name": self.full_name}


@dataclass
class TicketProject:
    """Joined project info on a ticket."""
    name: str


@dataclass
class TicketAssignee:
    """Joined assignee info on a ticket."""
    email: str
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Full name, or the local part of the email."""
        return self.full_name or self.email.split("@")[0]


@dataclass
class Ticket:
    """Ticket row, optionally denormalized with project and assignee."""
    id: str
    title: str
    status: str
    priority: str
    project_id: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    is_code_red: bool = False
    due_date: Optional[str] = None
    created_at: Optional[str] = None
    resolved_at: Optional[str] = None
    closed_at: Optional[str] = None
    created_by: Optional[str] = None
    # Joined fields
    project: Optional[TicketProject] = None
    assignee: Optional[TicketAssignee] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Ticket":
        """Create from a `tickets` row."""
        return cls(
            id=str(row["id"]),
            title=row.get("title", ""),
            status=row.get("status", "wip"),
            priority=row.get("priority", "medium"),
            project_id=row.get("project_id", ""),
            description=row.get("description"),
            assigned_to=row.get("assigned_to"),
            is_code_red=bool(row.get("is_code_red", False)),
            due_date=row.get("due_date"),
            created_at=row.get("created_at"),
            resolved_at=row.get("resolved_at"),
            closed_at=row.get("closed_at"),
            created_by=row.get("created_by"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses (includes joined fields)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "project_id": self.project_id,
            "assigned_to": self.assigned_to,
            "is_code_red": self.is_code_red,
            "due_date": self.due_date,
            "created_at": self.created_at,
            "resolved_at": self.resolved_at,
            "closed_at": self.closed_at,
            "created_by": self.created_by,
            "project": {"name": self.project.name} if self.project else None,
            "assignee": {
                "email": self.assignee.email,
                "full_name": self.assignee.full_name,
            } if self.assignee else None,
        }


@dataclass
class TicketsData:
    """Result of one combined fetch: tickets plus the lookup collections."""
    tickets: List[Ticket] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    users: List[Profile] = field(default_factory=list)


@dataclass
class NewTicket:
    """Fields for inserting a ticket row."""
    title: str
    project_id: str
    priority: str
    created_by: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        """Row payload for the `tickets` insert."""
        return {
            "title": self.title,
            "description": self.description,
            "project_id": self.project_id,
            "priority": self.priority,
            "assigned_to": self.assigned_to,
            "due_date": self.due_date,
            "created_by": self.created_by,
        }
