"""Unit tests for user_management: load, toggle and delete with notifications."""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from data_source import MOCK_USERS_KEY, SEED_IDS, LocalStorage, LocalUserSource, RemoteUserSource
from models import UserRecord
from supabase_client import DataSourceError
from user_management import UserManagementController, UserManagementState


def _record(user_id: str, is_active: bool = True) -> UserRecord:
    return UserRecord.from_row({"id": user_id, "first_name": user_id.upper(), "is_active": is_active})


class _Notifications:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, kind: str, message: str) -> None:
        self.calls.append((kind, message))


class TestFallbackMode(unittest.TestCase):
    """Controller over LocalUserSource (backend not configured)."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(Path(self._tmp.name))
        self.notify = _Notifications()
        self.controller = UserManagementController(LocalUserSource(self.storage), notify=self.notify, language="en")
        self.assertTrue(self.controller.load())

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _ids(self) -> list:
        return [u.id for u in self.controller.state.users]

    def test_load_clears_loading_flag(self) -> None:
        self.assertFalse(self.controller.state.loading)
        self.assertEqual(set(self._ids()), set(SEED_IDS))

    def test_seed_u1_scenario(self) -> None:
        u1 = self.controller.state.find("u1")
        self.assertTrue(u1.is_active)

        self.assertTrue(self.controller.toggle_status("u1"))
        self.assertFalse(self.controller.state.find("u1").is_active)
        self.assertEqual(self.notify.calls[-1], ("success", "User status updated"))

        calls_before = list(self.notify.calls)
        self.assertFalse(self.controller.delete_user("u1", confirmed=False))
        self.assertIn("u1", self._ids())
        self.assertEqual(self.notify.calls, calls_before)

        self.assertTrue(self.controller.delete_user("u1", confirmed=True))
        self.assertNotIn("u1", self._ids())
        self.assertEqual(self.notify.calls[-1], ("success", "User deleted successfully"))

    def test_toggle_twice_restores_flag(self) -> None:
        original = self.controller.state.find("u4").is_active
        self.controller.toggle_status("u4")
        self.controller.toggle_status("u4")
        self.assertEqual(self.controller.state.find("u4").is_active, original)

    def test_toggle_unknown_id_is_noop(self) -> None:
        before = list(self.controller.state.users)
        self.assertFalse(self.controller.toggle_status("missing"))
        self.assertEqual(self.controller.state.users, before)
        self.assertEqual(self.notify.calls, [])

    def test_delete_stored_user_updates_view_and_store(self) -> None:
        self.storage.set_item(MOCK_USERS_KEY, json.dumps([{"id": "s1", "is_active": True}, {"id": "s2", "is_active": True}]))
        self.controller.load()
        self.controller.delete_user("s1", confirmed=True)
        self.assertNotIn("s1", self._ids())
        self.assertIn("s2", self._ids())
        stored = [row["id"] for row in json.loads(self.storage.get_item(MOCK_USERS_KEY))]
        self.assertEqual(stored, ["s2"])

    def test_delete_unknown_id_leaves_view_unchanged(self) -> None:
        before = self._ids()
        self.controller.delete_user("missing", confirmed=True)
        self.assertEqual(self._ids(), before)

    def test_french_notifications(self) -> None:
        self.controller.language = "fr"
        self.controller.toggle_status("u2")
        self.assertEqual(self.notify.calls[-1], ("success", "Statut utilisateur mis à jour"))


class TestBackendMode(unittest.TestCase):
    """Controller over a source that needs a reload after every write."""

    def setUp(self) -> None:
        self.source = MagicMock(spec=RemoteUserSource)
        self.source.reloads_after_write = True
        self.source.load.return_value = [_record("a"), _record("b", is_active=False)]
        self.source.set_active.return_value = None
        self.notify = _Notifications()
        self.controller = UserManagementController(self.source, notify=self.notify, language="en")
        self.controller.load()

    def test_toggle_updates_then_reloads(self) -> None:
        self.source.load.return_value = [_record("a", is_active=False), _record("b", is_active=False)]
        self.assertTrue(self.controller.toggle_status("a"))
        self.source.set_active.assert_called_once_with("a", False)
        self.assertEqual(self.source.load.call_count, 2)
        self.assertFalse(self.controller.state.find("a").is_active)
        self.assertEqual(self.notify.calls, [("success", "User status updated")])

    def test_delete_then_reload(self) -> None:
        self.source.load.return_value = [_record("b", is_active=False)]
        self.assertTrue(self.controller.delete_user("a", confirmed=True))
        self.source.delete.assert_called_once_with("a")
        self.assertEqual([u.id for u in self.controller.state.users], ["b"])

    def test_declined_delete_does_not_touch_backend(self) -> None:
        self.controller.delete_user("a", confirmed=False)
        self.source.delete.assert_not_called()
        self.assertEqual(self.notify.calls, [])

    def test_load_failure_keeps_previous_view(self) -> None:
        self.source.load.side_effect = DataSourceError("boom", 500)
        with self.assertLogs("user_management", level="ERROR"):
            self.assertFalse(self.controller.load())
        self.assertEqual([u.id for u in self.controller.state.users], ["a", "b"])
        self.assertFalse(self.controller.state.loading)
        self.assertEqual(self.notify.calls, [("error", "Error loading users")])

    def test_toggle_failure_notifies_without_reload(self) -> None:
        self.source.set_active.side_effect = DataSourceError("denied", 403)
        with self.assertLogs("user_management", level="ERROR"):
            self.assertFalse(self.controller.toggle_status("a"))
        self.assertEqual(self.source.load.call_count, 1)
        self.assertEqual(self.notify.calls, [("error", "Error updating user")])

    def test_delete_failure_notifies(self) -> None:
        self.source.delete.side_effect = DataSourceError("denied", 403)
        with self.assertLogs("user_management", level="ERROR"):
            self.assertFalse(self.controller.delete_user("a", confirmed=True))
        self.assertIn("a", [u.id for u in self.controller.state.users])
        self.assertEqual(self.notify.calls, [("error", "Error deleting user")])

    def test_reload_failure_after_write_reports_both(self) -> None:
        self.source.load.side_effect = DataSourceError("down")
        with self.assertLogs("user_management", level="ERROR"):
            self.controller.toggle_status("a")
        self.assertEqual(
            self.notify.calls,
            [("error", "Error loading users"), ("success", "User status updated")],
        )


class TestStateVisibleUsers(unittest.TestCase):
    def test_visible_users_applies_filters(self) -> None:
        state = UserManagementState(users=[_record("john"), _record("jane", is_active=False)])
        state.search = "jo"
        self.assertEqual([u.id for u in state.visible_users()], ["john"])
        state.search = ""
        state.status = "inactive"
        self.assertEqual([u.id for u in state.visible_users()], ["jane"])


if __name__ == "__main__":
    unittest.main()
