"""
User Management Controller
==========================

View state and actions behind the user management screen:

- load(): fetch every user from the active data source
- toggle_status(): flip a user's active flag
- delete_user(): delete a user after explicit confirmation

Every action ends in a localized notification. Failures are logged and
reported, never retried and never raised to the page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from data_source import UserDataSource
from filters import ALL, filter_users
from i18n import t
from models import UserRecord

logger = logging.getLogger(__name__)

# notify(kind, message) with kind in {"success", "error"}
Notifier = Callable[[str, str], None]


@dataclass
class UserManagementState:
    users: List[UserRecord] = field(default_factory=list)
    loading: bool = True
    search: str = ""
    role: str = ALL
    status: str = ALL

    def visible_users(self) -> List[UserRecord]:
        return filter_users(self.users, self.search, self.role, self.status)

    def find(self, user_id: str) -> Optional[UserRecord]:
        return next((u for u in self.users if u.id == user_id), None)


class UserManagementController:
    def __init__(
        self,
        source: UserDataSource,
        state: Optional[UserManagementState] = None,
        notify: Optional[Notifier] = None,
        language: Optional[str] = None,
    ):
        self.source = source
        self.state = state or UserManagementState()
        self.notify: Notifier = notify or (lambda kind, message: None)
        self.language = language

    def _t(self, key: str) -> str:
        return t(key, self.language)

    def load(self) -> bool:
        """Replace view state with a fresh read. Returns False on failure."""
        self.state.loading = True
        try:
            self.state.users = self.source.load()
            return True
        except Exception:
            logger.exception("Error fetching users")
            self.notify("error", self._t("load_error"))
            return False
        finally:
            self.state.loading = False

    def toggle_status(self, user_id: str) -> bool:
        """Flip the active flag of ``user_id``. No confirmation is needed."""
        user = self.state.find(user_id)
        if user is None:
            logger.warning("Toggle requested for unknown user %s", user_id)
            return False
        try:
            updated = self.source.set_active(user_id, not user.is_active)
        except Exception:
            logger.exception("Error updating user status for %s", user_id)
            self.notify("error", self._t("update_error"))
            return False

        if self.source.reloads_after_write or updated is None:
            self.load()
        else:
            self.state.users = updated
        self.notify("success", self._t("status_updated"))
        return True

    def delete_user(self, user_id: str, confirmed: bool) -> bool:
        """
        Delete ``user_id`` once the operator has confirmed.

        A declined confirmation aborts silently. In fallback mode the view is
        patched in place; otherwise it is reloaded from the backend.
        """
        if not confirmed:
            return False
        try:
            self.source.delete(user_id)
        except Exception:
            logger.exception("Error deleting user %s", user_id)
            self.notify("error", self._t("delete_error"))
            return False

        if self.source.reloads_after_write:
            self.load()
        else:
            self.state.users = [u for u in self.state.users if u.id != user_id]
        self.notify("success", self._t("user_deleted"))
        return True
