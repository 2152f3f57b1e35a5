from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
load_dotenv(Path(__file__).resolve().parents[1] / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")


# Base directory (shared across pages)
DASHBOARD_DIR = Path(__file__).resolve().parent


# =============================================================================
# CONFIGURATION
# =============================================================================

_local_secrets_cache: Optional[Dict[str, Any]] = None


def _load_local_secrets() -> Dict[str, Any]:
    """Parse Dashboard/.streamlit/secrets.toml once; empty when missing or unreadable."""
    global _local_secrets_cache
    if _local_secrets_cache is None:
        secrets_path = DASHBOARD_DIR / ".streamlit" / "secrets.toml"
        _local_secrets_cache = {}
        if secrets_path.exists():
            try:
                _local_secrets_cache = tomllib.loads(secrets_path.read_text())
            except tomllib.TOMLDecodeError:
                logging.getLogger(__name__).warning("Ignoring unreadable secrets file %s", secrets_path)
    return _local_secrets_cache


def _lookup(mapping: Any, name: str, section: str) -> Optional[Any]:
    """First non-empty value for ``name`` at the top of ``mapping`` or under ``[section]``."""
    for scope in (mapping, mapping.get(section)):
        if hasattr(scope, "get"):
            val = scope.get(name)
            if val not in (None, ""):
                return val
    return None


def get_secret(name: str, default: Optional[str] = None, section: str = "supabase") -> Optional[str]:
    """
    Fetch a setting from st.secrets, dashboard-local secrets, or env vars.

    Both ``SUPABASE_URL = "..."`` and ``[supabase] SUPABASE_URL = "..."`` are accepted.
    """
    try:
        val = _lookup(st.secrets, name, section)
    except FileNotFoundError:
        # no secrets.toml, or one that does not parse
        val = None
    if val is None:
        val = _lookup(_load_local_secrets(), name, section)
    return val if val is not None else os.getenv(name, default)


@dataclass
class Settings:
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_timeout_sec: float = 10.0
    mock_storage_dir: Path = DASHBOARD_DIR / ".local_storage"
    default_language: str = "en"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from secrets and environment."""
    storage_dir = get_secret("MOCK_STORAGE_DIR")
    return Settings(
        supabase_url=(get_secret("SUPABASE_URL") or "").strip(),
        supabase_anon_key=(get_secret("SUPABASE_ANON_KEY") or "").strip(),
        supabase_timeout_sec=float(get_secret("SUPABASE_TIMEOUT_SEC", "10") or 10),
        mock_storage_dir=Path(storage_dir) if storage_dir else DASHBOARD_DIR / ".local_storage",
        default_language=(get_secret("DEFAULT_LANGUAGE", "en") or "en").lower(),
        log_level=(get_secret("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    root.setLevel(level)


# =============================================================================
# EXPORT HELPERS
# =============================================================================

def download_button(filename: str, rows: List[dict], label: str = "Export CSV", key: Optional[str] = None):
    if not rows:
        return
    df = pd.DataFrame(rows)
    data = df.to_csv(index=False).encode("utf-8")
    st.download_button(label, data=data, file_name=filename, mime="text/csv", key=key)
