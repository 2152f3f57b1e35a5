from __future__ import annotations

import html
from typing import List

import streamlit as st

from data_source import get_data_source
from filters import ROLE_FILTER_OPTIONS, STATUS_FILTER_OPTIONS, summarize
from i18n import get_language, t
from models import UserRecord, UserRole
from user_management import UserManagementController, UserManagementState
from utils import download_button

_STATE_KEY = "user_mgmt_state"
_TOASTS_KEY = "user_mgmt_toasts"
_PENDING_DELETE_KEY = "user_mgmt_pending_delete"
_DIALOG_SHOWN_KEY = "user_mgmt_delete_dialog_shown"
_DIALOG_BUTTON_KEYS = ("confirm_delete_btn", "cancel_delete_btn")

_TOAST_ICONS = {"success": "✅", "error": "❌"}

_ROLE_FILTER_LABELS = {
    "all": "all_roles",
    UserRole.CLIENT.value: "filter_clients",
    UserRole.ADMIN.value: "filter_admins",
    UserRole.MANAGER.value: "filter_managers",
    UserRole.STAFF.value: "filter_staff",
}
_STATUS_FILTER_LABELS = {"all": "all_status", "active": "filter_active", "inactive": "filter_inactive"}


def _queue_toast(kind: str, message: str) -> None:
    # Queued so toasts survive the st.rerun() that follows an action
    st.session_state.setdefault(_TOASTS_KEY, []).append((kind, message))


def _flush_toasts() -> None:
    for kind, message in st.session_state.pop(_TOASTS_KEY, []):
        st.toast(message, icon=_TOAST_ICONS.get(kind))


def _get_controller() -> UserManagementController:
    if _STATE_KEY not in st.session_state:
        st.session_state[_STATE_KEY] = UserManagementState()
    return UserManagementController(
        get_data_source(),
        st.session_state[_STATE_KEY],
        notify=_queue_toast,
        language=get_language(),
    )


def _render_stats(users: List[UserRecord]) -> None:
    stats = summarize(users)
    cols = st.columns(4)
    cols[0].metric(t("total_users"), stats.total)
    cols[1].metric(t("active_users"), stats.active)
    cols[2].metric(t("administrators"), stats.administrators)
    cols[3].metric(t("clients"), stats.clients)


def _render_filters(state: UserManagementState) -> None:
    cols = st.columns([2, 1, 1])
    state.search = cols[0].text_input(
        t("search"),
        placeholder=t("search_placeholder"),
        key="user_mgmt_search",
    )
    state.role = cols[1].selectbox(
        t("role"),
        options=ROLE_FILTER_OPTIONS,
        format_func=lambda v: t(_ROLE_FILTER_LABELS.get(v, v)),
        key="user_mgmt_role",
    )
    state.status = cols[2].selectbox(
        t("status"),
        options=STATUS_FILTER_OPTIONS,
        format_func=lambda v: t(_STATUS_FILTER_LABELS.get(v, v)),
        key="user_mgmt_status",
    )


def _esc(value) -> str:
    return html.escape(str(value or ""), quote=True)


def _avatar_html(user: UserRecord) -> str:
    if user.profile_image_url:
        return (
            f"<img src='{_esc(user.profile_image_url)}' alt='{_esc(user.full_name)}' "
            f"style='width: 40px; height: 40px; border-radius: 50%; object-fit: cover;'>"
        )
    return (
        f"<div style='width: 40px; height: 40px; border-radius: 50%; background: {user.role.color}; "
        f"color: white; display: flex; align-items: center; justify-content: center; font-weight: 700;'>"
        f"{_esc(user.initials) or '?'}</div>"
    )


def _render_user_row(controller: UserManagementController, user: UserRecord) -> None:
    col_user, col_contact, col_role, col_status, col_joined, col_actions = st.columns([3, 3, 1.4, 1.2, 1.2, 1.4])

    with col_user:
        st.markdown(f"""
        <div style='display: flex; align-items: center; gap: 0.75rem; padding: 6px 0;'>
            {_avatar_html(user)}
            <div>
                <div style='font-weight: 600; color: #0f172a;'>{_esc(user.full_name or user.username)}</div>
                <div style='font-size: 0.8rem; color: #64748b;'>@{_esc(user.username)}</div>
            </div>
        </div>
        """, unsafe_allow_html=True)

    with col_contact:
        phone = f"<div style='font-size: 0.8rem; color: #64748b;'>📞 {_esc(user.phone)}</div>" if user.phone else ""
        st.markdown(f"""
        <div style='padding: 6px 0;'>
            <div style='font-size: 0.85rem;'>✉️ {_esc(user.email)}</div>
            {phone}
        </div>
        """, unsafe_allow_html=True)

    with col_role:
        color = user.role.color
        st.markdown(f"""
        <div style='padding: 10px 0;'>
            <span style='background: {color}15; color: {color}; padding: 4px 10px;
                         border-radius: 20px; font-size: 0.75rem; font-weight: 600;'>
                {user.role.display_name(controller.language)}
            </span>
        </div>
        """, unsafe_allow_html=True)

    with col_status:
        status_color = "#10b981" if user.is_active else "#ef4444"
        status_text = t("status_active") if user.is_active else t("status_inactive")
        st.markdown(
            f"<div style='padding: 10px 0; color: {status_color}; font-size: 0.85rem; font-weight: 500;'>"
            f"● {status_text}</div>",
            unsafe_allow_html=True,
        )

    with col_joined:
        st.markdown(
            f"<div style='padding: 10px 0; font-size: 0.85rem; color: #64748b;'>📅 {user.joined_label()}</div>",
            unsafe_allow_html=True,
        )

    with col_actions:
        b1, b2 = st.columns(2)
        toggle_help = t("deactivate_user") if user.is_active else t("activate_user")
        if b1.button("🚫" if user.is_active else "✔️", key=f"toggle_{user.id}", help=toggle_help):
            controller.toggle_status(user.id)
            st.rerun()
        if b2.button("🗑️", key=f"delete_{user.id}", help=t("delete_user")):
            st.session_state[_PENDING_DELETE_KEY] = user.id
            st.session_state.pop(_DIALOG_SHOWN_KEY, None)
            st.rerun()

    st.markdown("<hr style='margin: 4px 0; border: none; border-top: 1px solid #f1f5f9;'>", unsafe_allow_html=True)


def _clear_pending_delete() -> None:
    st.session_state.pop(_PENDING_DELETE_KEY, None)
    st.session_state.pop(_DIALOG_SHOWN_KEY, None)


def _render_delete_dialog(controller: UserManagementController) -> None:
    user_id = st.session_state.get(_PENDING_DELETE_KEY)
    if user_id is None:
        return

    # A full rerun after the dialog was shown, without one of its buttons
    # pressed, means it was closed with X or Escape.
    answered = any(st.session_state.get(key) for key in _DIALOG_BUTTON_KEYS)
    if st.session_state.get(_DIALOG_SHOWN_KEY) == user_id and not answered:
        _clear_pending_delete()
        return
    st.session_state[_DIALOG_SHOWN_KEY] = user_id

    @st.dialog(t("delete_user"))
    def confirm_delete():
        user = controller.state.find(user_id)
        st.write(t("confirm_delete"))
        if user is not None:
            st.caption(f"{user.full_name or user.username} ({user.email})")
        c1, c2 = st.columns(2)
        if c1.button(t("confirm"), type="primary", use_container_width=True, key="confirm_delete_btn"):
            _clear_pending_delete()
            controller.delete_user(user_id, confirmed=True)
            st.rerun()
        if c2.button(t("cancel"), use_container_width=True, key="cancel_delete_btn"):
            _clear_pending_delete()
            controller.delete_user(user_id, confirmed=False)
            st.rerun()

    confirm_delete()


def scene_users():
    controller = _get_controller()
    state = controller.state

    st.markdown(f"""
    <div style='margin-bottom: 1rem;'>
        <h2 style='margin: 0 0 0.25rem 0; color: #0f172a;'>👥 {t("page_title")}</h2>
        <p style='margin: 0; color: #64748b;'>{t("page_subtitle")}</p>
    </div>
    """, unsafe_allow_html=True)

    if controller.source.is_fallback:
        st.info(f"🧪 {t('fallback_mode')}")

    if state.loading:
        with st.spinner():
            controller.load()

    _flush_toasts()

    _render_stats(state.users)

    st.markdown("<div class='panel'>", unsafe_allow_html=True)
    _render_filters(state)
    visible = state.visible_users()
    fcols = st.columns([3, 1])
    fcols[0].caption(f"{len(visible)} {t('users_found')}")
    with fcols[1]:
        download_button(
            "users.csv",
            [{**u.to_row(), "role": u.role.value, "admins": len(u.admins)} for u in visible],
            label=t("export_csv"),
            key="user_mgmt_export",
        )
    st.markdown("</div>", unsafe_allow_html=True)

    if not visible:
        st.info(t("no_users"))
    else:
        header = st.columns([3, 3, 1.4, 1.2, 1.2, 1.4])
        for col, key in zip(header, ["col_user", "col_contact", "col_role", "col_status", "col_joined", "col_actions"]):
            col.markdown(f"**{t(key)}**")
        for user in visible:
            _render_user_row(controller, user)

    _render_delete_dialog(controller)
