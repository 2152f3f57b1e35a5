"""
User Data Sources
=================

Where the user management screen reads and writes user records:

1. RemoteUserSource: the Supabase ``users`` table, joined with ``admins``
2. LocalUserSource: fallback mode when no backend is configured. Records
   are the built-in seed users followed by the list persisted under the
   ``geocasa_mock_users`` key of a local key/value store.

The implementation is chosen once, by ``get_data_source()``. Callers use the
``UserDataSource`` contract and never check the configuration themselves.

Fallback store invariant: seed users are never written to the store. Every
write strips seed ids, so the combined list is rebuilt on each load.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import streamlit as st

from models import UserRecord
from supabase_client import DataSourceError, SupabaseClient
from utils import Settings, load_settings

logger = logging.getLogger(__name__)

MOCK_USERS_KEY = "geocasa_mock_users"
USERS_TABLE = "users"
USERS_SELECT = "*,admins(role,department,is_active)"

_PLACEHOLDER_MARKERS = ("your-project", "your_supabase", "your-anon-key", "placeholder")


# =============================================================================
# SEED USERS (fallback mode only)
# =============================================================================

SEED_USERS: List[Dict[str, Any]] = [
    {
        "id": "u1",
        "first_name": "Jean",
        "last_name": "Dupont",
        "username": "jdupont",
        "email": "jean.dupont@example.com",
        "phone": "+33 6 12 34 56 78",
        "profile_image_url": None,
        "is_active": True,
        "created_at": "2024-01-15T10:30:00Z",
        "admins": [],
    },
    {
        "id": "u2",
        "first_name": "Marie",
        "last_name": "Martin",
        "username": "mmartin",
        "email": "admin@geocasa.com",
        "phone": None,
        "profile_image_url": None,
        "is_active": True,
        "created_at": "2023-11-02T08:00:00Z",
        "admins": [{"role": "admin", "department": "Direction", "is_active": True}],
    },
    {
        "id": "u3",
        "first_name": "Paul",
        "last_name": "Bernard",
        "username": "pbernard",
        "email": "paul.bernard@geocasa.com",
        "phone": "+33 6 98 76 54 32",
        "profile_image_url": None,
        "is_active": True,
        "created_at": "2024-03-20T14:45:00Z",
        "admins": [{"role": "manager", "department": "Ventes", "is_active": True}],
    },
    {
        "id": "u4",
        "first_name": "Sophie",
        "last_name": "Leroy",
        "username": "sleroy",
        "email": "sophie.leroy@geocasa.com",
        "phone": None,
        "profile_image_url": None,
        "is_active": False,
        "created_at": "2024-05-05T09:15:00Z",
        "admins": [{"role": "staff", "department": "Support", "is_active": True}],
    },
]

SEED_IDS = frozenset(u["id"] for u in SEED_USERS)


def seed_records() -> List[UserRecord]:
    """Fresh copies of the seed users."""
    return [UserRecord.from_row(row) for row in SEED_USERS]


# =============================================================================
# LOCAL KEY/VALUE STORAGE
# =============================================================================

class LocalStorage:
    """
    Key/value storage with browser local-storage semantics.

    Each key is one JSON file under ``root``. Writes replace the whole value
    atomically (temp file + ``os.replace``).
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# =============================================================================
# DATA SOURCES
# =============================================================================

class UserDataSource(ABC):
    """Read/write contract shared by the live and fallback sources."""

    # When True the caller must reload after a write to see its effect
    reloads_after_write: bool = True
    is_fallback: bool = False

    @abstractmethod
    def load(self) -> List[UserRecord]:
        """Return all users, newest first for the live table."""

    @abstractmethod
    def set_active(self, user_id: str, is_active: bool) -> Optional[List[UserRecord]]:
        """
        Set the active flag of one user.

        Returns the full updated list when it is available without a reload,
        otherwise None.
        """

    @abstractmethod
    def delete(self, user_id: str) -> None:
        """Delete one user. Unknown ids are a no-op."""


class LocalUserSource(UserDataSource):
    reloads_after_write = False
    is_fallback = True

    def __init__(self, storage: LocalStorage, key: str = MOCK_USERS_KEY):
        self.storage = storage
        self.key = key

    def _read_stored(self) -> List[Dict[str, Any]]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored value under %s is not valid JSON, treating as empty", self.key)
            return []
        if not isinstance(data, list):
            logger.warning("Stored value under %s is not a list, treating as empty", self.key)
            return []
        return [row for row in data if isinstance(row, dict) and "id" in row]

    def _write_stored(self, records: List[UserRecord]) -> None:
        rows = [r.to_row() for r in records if r.id not in SEED_IDS]
        self.storage.set_item(self.key, json.dumps(rows))

    def load(self) -> List[UserRecord]:
        stored = [UserRecord.from_row(row) for row in self._read_stored()]
        return seed_records() + stored

    def set_active(self, user_id: str, is_active: bool) -> Optional[List[UserRecord]]:
        records = self.load()
        for record in records:
            if record.id == user_id:
                record.is_active = is_active
        self._write_stored(records)
        return records

    def delete(self, user_id: str) -> None:
        rows = [
            row for row in self._read_stored()
            if str(row["id"]) != user_id and str(row["id"]) not in SEED_IDS
        ]
        self.storage.set_item(self.key, json.dumps(rows))


class RemoteUserSource(UserDataSource):
    reloads_after_write = True
    is_fallback = False

    def __init__(self, client: SupabaseClient):
        self.client = client

    def load(self) -> List[UserRecord]:
        rows = self.client.select(USERS_TABLE, USERS_SELECT, order="created_at.desc")
        try:
            return [UserRecord.from_row(row) for row in rows]
        except (KeyError, TypeError) as e:
            raise DataSourceError(f"Malformed user row: {e}") from e

    def set_active(self, user_id: str, is_active: bool) -> Optional[List[UserRecord]]:
        self.client.update(USERS_TABLE, {"is_active": is_active}, id=user_id)
        return None

    def delete(self, user_id: str) -> None:
        self.client.delete(USERS_TABLE, id=user_id)


# =============================================================================
# SELECTION
# =============================================================================

def is_backend_configured(settings: Settings) -> bool:
    """True when both the Supabase URL and anon key are set to real values."""
    url = settings.supabase_url
    key = settings.supabase_anon_key
    if not url or not key:
        return False
    if not url.startswith(("http://", "https://")):
        return False
    lowered = f"{url} {key}".lower()
    return not any(marker in lowered for marker in _PLACEHOLDER_MARKERS)


def build_data_source(settings: Settings) -> UserDataSource:
    if is_backend_configured(settings):
        logger.info("Using Supabase backend at %s", settings.supabase_url)
        client = SupabaseClient(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.supabase_timeout_sec,
        )
        return RemoteUserSource(client)
    logger.info("Supabase not configured, using local fallback store in %s", settings.mock_storage_dir)
    return LocalUserSource(LocalStorage(settings.mock_storage_dir))


@st.cache_resource
def get_data_source() -> UserDataSource:
    """The process-wide data source, selected once from settings."""
    return build_data_source(load_settings())
