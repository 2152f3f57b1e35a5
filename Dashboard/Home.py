"""
GeoCasa Admin - Main Application
================================

Entry point for the GeoCasa admin panel. It includes:
- Settings and logging set-up from secrets / environment
- The ambient language context (English / French) in the sidebar
- The user management screen

Data Source Selection:
1. If SUPABASE_URL and SUPABASE_ANON_KEY are configured, users are read from
   and written to the Supabase ``users`` table
2. Otherwise the screen runs in fallback mode on built-in seed users plus a
   locally persisted list
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import streamlit as st

from i18n import LANGUAGE_LABELS, LANGUAGE_SESSION_KEY, SUPPORTED_LANGUAGES, init_language, t
from utils import configure_logging, load_settings

# Scenes are implemented in src_page/*
from src_page.users import scene_users

SCENES: Dict[str, Callable[[], None]] = {
    "users": scene_users,
}


def _inject_styles() -> None:
    css_path = Path(__file__).parent / "styles.css"
    if css_path.exists():
        st.markdown(f"<style>{css_path.read_text()}</style>", unsafe_allow_html=True)

    st.markdown("""
    <style>
        .panel {
            background: #ffffff;
            border: 1px solid #e2e8f0;
            border-radius: 12px;
            padding: 8px 0;
            margin: 8px 0 16px 0;
        }
        div[data-testid="stMetric"] {
            background: #ffffff;
            border: 1px solid #e2e8f0;
            border-radius: 12px;
            padding: 16px;
            box-shadow: 0 4px 6px rgba(0,0,0,0.05);
        }
    </style>
    """, unsafe_allow_html=True)


def _render_language_sidebar() -> None:
    # The radio is bound to the session language key, so picking a value
    # switches the language for the whole rerun
    with st.sidebar:
        st.radio(
            t("language"),
            options=list(SUPPORTED_LANGUAGES),
            format_func=lambda code: LANGUAGE_LABELS.get(code, code),
            horizontal=True,
            key=LANGUAGE_SESSION_KEY,
        )


def render_scene_page(scene_key: str) -> None:
    """Render a scene with the shared page set-up."""
    settings = load_settings()
    configure_logging(settings.log_level)

    st.set_page_config(page_title="GeoCasa Admin", page_icon="🏠", layout="wide")
    _inject_styles()

    init_language(settings.default_language)
    _render_language_sidebar()

    scene = SCENES.get(scene_key)
    if scene is None:
        st.error(f"Unknown scene '{scene_key}'.")
        return
    scene()


if __name__ == "__main__":
    render_scene_page("users")
