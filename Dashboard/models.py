"""
User Data Model
===============

Platform user records as stored in the ``users`` table (or the local
fallback store), together with their optional ``admins`` entries.

The effective role of a user is resolved once, when the record is built
from a row, and is never written back:

- CLIENT: no admin entry (default)
- ADMIN: platform administrator
- MANAGER: agency manager
- STAFF: agency staff
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# USER ROLES
# =============================================================================

class UserRole(Enum):
    CLIENT = "client"
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"

    def display_name(self, language: Optional[str] = None) -> str:
        """Localized role label."""
        from i18n import t

        return t(f"role_{self.value}", language)

    @property
    def color(self) -> str:
        """Badge colour used in the users table."""
        colors = {
            UserRole.ADMIN: "#dc2626",  # Red
            UserRole.MANAGER: "#7c3aed",  # Purple
            UserRole.STAFF: "#2563eb",  # Blue
            UserRole.CLIENT: "#16a34a",  # Green
        }
        return colors.get(self, "#64748b")


_ROLE_LOOKUP = {r.value: r for r in UserRole}


@dataclass
class AdminRole:
    role: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AdminRole":
        return cls(
            role=row.get("role"),
            department=row.get("department"),
            is_active=bool(row.get("is_active", True)),
        )

    def to_row(self) -> Dict[str, Any]:
        return {"role": self.role, "department": self.department, "is_active": self.is_active}


def resolve_role(admins: List[AdminRole]) -> UserRole:
    """
    Resolve the effective role from the first admin entry.

    Missing entries, a blank role name and unknown role names all resolve
    to ``UserRole.CLIENT``.
    """
    if not admins:
        return UserRole.CLIENT
    role_value = str(admins[0].role or "").strip().lower()
    return _ROLE_LOOKUP.get(role_value, UserRole.CLIENT)


# =============================================================================
# USER RECORD
# =============================================================================

@dataclass
class UserRecord:
    """
    A platform user as shown on the user management screen.

    Attributes:
        id: Primary key of the ``users`` row
        first_name / last_name: Display name parts (may be empty)
        username: Login handle
        email: Contact email
        phone: Optional phone number
        profile_image_url: Optional avatar URL
        is_active: Whether the account is active
        created_at: Creation timestamp as stored (ISO 8601 string)
        admins: Joined ``admins`` entries, possibly empty
        role: Effective role, derived from ``admins`` at construction
    """
    id: str
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    email: str = ""
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    admins: List[AdminRole] = field(default_factory=list)
    role: UserRole = field(init=False)

    def __post_init__(self) -> None:
        self.role = resolve_role(self.admins)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserRecord":
        """Build a record from a table row or a stored JSON object."""
        admins_raw = row.get("admins") or []
        if isinstance(admins_raw, dict):
            # PostgREST returns an object instead of a list for one-to-one joins
            admins_raw = [admins_raw]
        return cls(
            id=str(row["id"]),
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            username=row.get("username") or "",
            email=row.get("email") or "",
            phone=row.get("phone") or None,
            profile_image_url=row.get("profile_image_url") or None,
            is_active=bool(row.get("is_active", False)),
            created_at=row.get("created_at"),
            admins=[AdminRole.from_row(a) for a in admins_raw if isinstance(a, dict)],
        )

    def to_row(self) -> Dict[str, Any]:
        """Serialize for the local store. The derived role is not persisted."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
            "email": self.email,
            "phone": self.phone,
            "profile_image_url": self.profile_image_url,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "admins": [a.to_row() for a in self.admins],
        }

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()

    @property
    def created_at_dt(self) -> Optional[datetime]:
        if not self.created_at:
            return None
        try:
            return datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return None

    def joined_label(self) -> str:
        """Creation date in French day-first format (dd/mm/YYYY)."""
        dt = self.created_at_dt
        return dt.strftime("%d/%m/%Y") if dt else "—"
