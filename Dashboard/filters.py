"""Client-side filtering and summary counts for the users table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from models import UserRecord, UserRole

ALL = "all"
STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"

ROLE_FILTER_OPTIONS = [ALL] + [r.value for r in UserRole]
STATUS_FILTER_OPTIONS = [ALL, STATUS_ACTIVE, STATUS_INACTIVE]


def matches_search(user: UserRecord, search: str) -> bool:
    """Case-insensitive substring match on first/last name, email and username."""
    if not search:
        return True
    needle = search.lower()
    return any(
        needle in (value or "").lower()
        for value in (user.first_name, user.last_name, user.email, user.username)
        if value
    )


def matches_role(user: UserRecord, role: str) -> bool:
    return role == ALL or user.role.value == role


def matches_status(user: UserRecord, status: str) -> bool:
    if status == ALL:
        return True
    if status == STATUS_ACTIVE:
        return user.is_active
    if status == STATUS_INACTIVE:
        return not user.is_active
    return False


def filter_users(
    users: Iterable[UserRecord],
    search: str = "",
    role: str = ALL,
    status: str = ALL,
) -> List[UserRecord]:
    """Users matching all three filters, in their original order."""
    return [
        u for u in users
        if matches_search(u, search) and matches_role(u, role) and matches_status(u, status)
    ]


@dataclass(frozen=True)
class UserStats:
    total: int
    active: int
    administrators: int
    clients: int


def summarize(users: Iterable[UserRecord]) -> UserStats:
    """Headline counts over every loaded user (filters are not applied)."""
    users = list(users)
    return UserStats(
        total=len(users),
        active=sum(1 for u in users if u.is_active),
        administrators=sum(1 for u in users if u.role == UserRole.ADMIN),
        clients=sum(1 for u in users if u.role == UserRole.CLIENT),
    )
