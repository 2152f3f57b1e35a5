"""
Language context for the admin screens.

The active language lives in ``st.session_state["language"]`` and is one of
``SUPPORTED_LANGUAGES``. Strings are looked up with ``t(key)``; unknown keys
fall back to the key itself so a missing translation never breaks a page.
"""

from __future__ import annotations

from typing import Dict, Optional

import streamlit as st

SUPPORTED_LANGUAGES = ("en", "fr")
LANGUAGE_LABELS = {"en": "English", "fr": "Français"}

LANGUAGE_SESSION_KEY = "language"

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    # Page
    "page_title": {"en": "User Management", "fr": "Gestion des Utilisateurs"},
    "page_subtitle": {"en": "Manage all platform users", "fr": "Gérez tous les utilisateurs de la plateforme"},
    "language": {"en": "Language", "fr": "Langue"},
    "fallback_mode": {
        "en": "Backend not configured: showing local demo data.",
        "fr": "Backend non configuré : affichage des données de démonstration locales.",
    },
    # Stats
    "total_users": {"en": "Total Users", "fr": "Total Utilisateurs"},
    "active_users": {"en": "Active Users", "fr": "Utilisateurs Actifs"},
    "administrators": {"en": "Administrators", "fr": "Administrateurs"},
    "clients": {"en": "Clients", "fr": "Clients"},
    # Filters
    "search_placeholder": {"en": "Search users...", "fr": "Rechercher des utilisateurs..."},
    "search": {"en": "Search", "fr": "Rechercher"},
    "role": {"en": "Role", "fr": "Rôle"},
    "status": {"en": "Status", "fr": "Statut"},
    "all_roles": {"en": "All Roles", "fr": "Tous les Rôles"},
    "filter_clients": {"en": "Clients", "fr": "Clients"},
    "filter_admins": {"en": "Administrators", "fr": "Administrateurs"},
    "filter_managers": {"en": "Managers", "fr": "Gestionnaires"},
    "filter_staff": {"en": "Staff", "fr": "Personnel"},
    "all_status": {"en": "All Status", "fr": "Tous les Statuts"},
    "filter_active": {"en": "Active", "fr": "Actifs"},
    "filter_inactive": {"en": "Inactive", "fr": "Inactifs"},
    "users_found": {"en": "users found", "fr": "utilisateurs trouvés"},
    # Table
    "col_user": {"en": "User", "fr": "Utilisateur"},
    "col_contact": {"en": "Contact", "fr": "Contact"},
    "col_role": {"en": "Role", "fr": "Rôle"},
    "col_status": {"en": "Status", "fr": "Statut"},
    "col_joined": {"en": "Joined", "fr": "Inscription"},
    "col_actions": {"en": "Actions", "fr": "Actions"},
    "status_active": {"en": "Active", "fr": "Actif"},
    "status_inactive": {"en": "Inactive", "fr": "Inactif"},
    "role_client": {"en": "Client", "fr": "Client"},
    "role_admin": {"en": "Admin", "fr": "Admin"},
    "role_manager": {"en": "Manager", "fr": "Gestionnaire"},
    "role_staff": {"en": "Staff", "fr": "Personnel"},
    "activate_user": {"en": "Activate User", "fr": "Activer l'Utilisateur"},
    "deactivate_user": {"en": "Deactivate User", "fr": "Désactiver l'Utilisateur"},
    "delete_user": {"en": "Delete User", "fr": "Supprimer l'Utilisateur"},
    "no_users": {"en": "No users match the current filters.", "fr": "Aucun utilisateur ne correspond aux filtres."},
    "export_csv": {"en": "Export CSV", "fr": "Exporter CSV"},
    # Confirmation
    "confirm_delete": {
        "en": "Are you sure you want to delete this user?",
        "fr": "Êtes-vous sûr de vouloir supprimer cet utilisateur ?",
    },
    "confirm": {"en": "Delete", "fr": "Supprimer"},
    "cancel": {"en": "Cancel", "fr": "Annuler"},
    # Notifications
    "load_error": {"en": "Error loading users", "fr": "Erreur lors du chargement des utilisateurs"},
    "status_updated": {"en": "User status updated", "fr": "Statut utilisateur mis à jour"},
    "update_error": {"en": "Error updating user", "fr": "Erreur lors de la mise à jour"},
    "user_deleted": {"en": "User deleted successfully", "fr": "Utilisateur supprimé avec succès"},
    "delete_error": {"en": "Error deleting user", "fr": "Erreur lors de la suppression"},
}


def normalize_language(language: Optional[str]) -> str:
    """Map any value onto a supported language code, defaulting to English."""
    code = (language or "").strip().lower()[:2]
    return code if code in SUPPORTED_LANGUAGES else "en"


def t(key: str, language: Optional[str] = None) -> str:
    """Translate ``key`` into ``language`` (or the session language)."""
    lang = normalize_language(language) if language else get_language()
    entry = TRANSLATIONS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key


def init_language(default: str = "en") -> None:
    if LANGUAGE_SESSION_KEY not in st.session_state:
        st.session_state[LANGUAGE_SESSION_KEY] = normalize_language(default)


def get_language() -> str:
    return normalize_language(st.session_state.get(LANGUAGE_SESSION_KEY, "en"))
