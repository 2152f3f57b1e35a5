"""Page-level tests: run Home.py with Streamlit's AppTest in fallback mode."""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from streamlit.testing.v1 import AppTest

from data_source import MOCK_USERS_KEY, LocalStorage, get_data_source

HOME = str(Path(__file__).resolve().parents[1] / "Dashboard" / "Home.py")


class TestUserManagementPage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self._env = patch.dict(os.environ, {
            "MOCK_STORAGE_DIR": self._tmp.name,
            "SUPABASE_URL": "",
            "SUPABASE_ANON_KEY": "",
        })
        self._env.start()
        get_data_source.clear()
        self.at = AppTest.from_file(HOME, default_timeout=30)
        self.at.run()

    def tearDown(self) -> None:
        get_data_source.clear()
        self._env.stop()
        self._tmp.cleanup()

    def test_renders_without_exception(self) -> None:
        self.assertFalse(self.at.exception)
        self.assertFalse(self.at.session_state["user_mgmt_state"].loading)

    def test_stats_cover_seed_users(self) -> None:
        values = {m.label: m.value for m in self.at.metric}
        self.assertEqual(values["Total Users"], "4")
        self.assertEqual(values["Active Users"], "3")
        self.assertEqual(values["Administrators"], "1")
        self.assertEqual(values["Clients"], "1")

    def test_search_narrows_result_count(self) -> None:
        self.at.text_input(key="user_mgmt_search").input("marie").run()
        captions = [c.value for c in self.at.caption]
        self.assertIn("1 users found", captions)

    def test_toggle_button_deactivates_user(self) -> None:
        self.at.button(key="toggle_u1").click().run()
        self.assertFalse(self.at.exception)
        state = self.at.session_state["user_mgmt_state"]
        self.assertFalse(state.find("u1").is_active)

    def test_french_language(self) -> None:
        self.at.radio(key="language").set_value("fr").run()
        labels = [m.label for m in self.at.metric]
        self.assertIn("Utilisateurs Actifs", labels)

    def _button_keys(self) -> list:
        return [b.key for b in self.at.button]

    def test_cancel_delete_keeps_user(self) -> None:
        self.at.button(key="delete_u1").click().run()
        self.assertIn("confirm_delete_btn", self._button_keys())
        self.at.button(key="cancel_delete_btn").click().run()
        self.assertFalse(self.at.exception)
        self.assertIsNotNone(self.at.session_state["user_mgmt_state"].find("u1"))
        self.assertEqual(len(self.at.toast), 0)
        self.assertNotIn("confirm_delete_btn", self._button_keys())

    def test_confirm_delete_removes_user(self) -> None:
        self.at.button(key="delete_u1").click().run()
        self.at.button(key="confirm_delete_btn").click().run()
        self.assertFalse(self.at.exception)
        self.assertIsNone(self.at.session_state["user_mgmt_state"].find("u1"))
        self.assertIn("User deleted successfully", [toast.value for toast in self.at.toast])

    def test_closed_dialog_does_not_reopen(self) -> None:
        self.at.button(key="delete_u1").click().run()
        self.assertIn("confirm_delete_btn", self._button_keys())
        # Any later full rerun without an answer means the dialog was closed
        self.at.text_input(key="user_mgmt_search").input("marie").run()
        self.assertNotIn("user_mgmt_pending_delete", self.at.session_state)
        self.assertNotIn("confirm_delete_btn", self._button_keys())
        self.at.text_input(key="user_mgmt_search").input("").run()
        self.assertNotIn("confirm_delete_btn", self._button_keys())
        self.assertIsNotNone(self.at.session_state["user_mgmt_state"].find("u1"))

    def test_user_fields_are_html_escaped(self) -> None:
        LocalStorage(Path(self._tmp.name)).set_item(MOCK_USERS_KEY, json.dumps([{
            "id": "x1",
            "first_name": "<img src=x onerror=alert(1)>",
            "last_name": "Doe",
            "username": "x1",
            "email": "x1@example.com",
            "is_active": True,
            "admins": [],
        }]))
        at = AppTest.from_file(HOME, default_timeout=30)
        at.run()
        self.assertFalse(at.exception)
        rendered = [m.value for m in at.markdown]
        self.assertTrue(any("&lt;img src=x onerror=alert(1)&gt;" in value for value in rendered))
        self.assertFalse(any("<img src=x onerror" in value for value in rendered))


if __name__ == "__main__":
    unittest.main()
