"""
Session state management for the Nomad admin app.
Handles page routing, the record being edited, the signed-in user and
one-shot flash messages that survive a rerun.
"""

import streamlit as st
from typing import Dict, Any, Optional, List
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

DEFAULT_PAGE = "dashboard"

# Pages reachable from the sidebar, in display order
NAV_PAGES = {
    'dashboard': "🏠 Dashboard",
    'spaces': "🏢 Spaces",
    'events': "📅 Events",
    'blog': "📝 Blog",
    'feedback': "👥 Community",
}

# Sub pages and the sidebar entry they belong to
SUB_PAGES = {
    'space_new': 'spaces',
    'space_edit': 'spaces',
    'event_new': 'events',
    'event_edit': 'events',
    'blog_new': 'blog',
    'blog_edit': 'blog',
}


class SessionManager:
    """Manages Streamlit session state for the admin app."""

    @staticmethod
    def initialize():
        """Initialize all session state variables with default values."""
        defaults = {
            'current_page': DEFAULT_PAGE,
            'current_record_id': None,
            'current_user': None,
            'flash_messages': [],
            'last_activity': datetime.now(),
            'session_id': None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if not st.session_state.session_id:
            st.session_state.session_id = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
            logger.info(f"Session initialized: {st.session_state.session_id}")

    @staticmethod
    def get_current_page() -> str:
        """Get the current page."""
        return st.session_state.get('current_page', DEFAULT_PAGE)

    @staticmethod
    def navigate(page: str, record_id: Optional[Any] = None):
        """
        Switch to another page, optionally carrying the id of the record
        the page should load.

        Args:
            page: Page name (a NAV_PAGES or SUB_PAGES key)
            record_id: Record identity for edit pages
        """
        if page not in NAV_PAGES and page not in SUB_PAGES:
            logger.warning(f"Unknown page requested: {page}")
            page = DEFAULT_PAGE
            record_id = None

        old_page = st.session_state.get('current_page')
        if old_page != page or st.session_state.get('current_record_id') != record_id:
            logger.info(f"Page transition: {old_page} -> {page} (record={record_id})")

        st.session_state.current_page = page
        st.session_state.current_record_id = record_id
        SessionManager.update_activity()

    @staticmethod
    def get_current_record_id() -> Optional[Any]:
        """Get the id of the record the current page works on."""
        return st.session_state.get('current_record_id')

    @staticmethod
    def get_nav_section() -> str:
        """Get the sidebar entry that owns the current page."""
        page = SessionManager.get_current_page()
        return SUB_PAGES.get(page, page)

    @staticmethod
    def get_current_user() -> Optional[Dict[str, Any]]:
        """Get the signed-in user, if any."""
        return st.session_state.get('current_user')

    @staticmethod
    def set_current_user(user: Optional[Dict[str, Any]]):
        """Set or clear the signed-in user."""
        old_email = (st.session_state.get('current_user') or {}).get('email')
        new_email = (user or {}).get('email')
        if old_email != new_email:
            logger.info(f"User changed: {old_email} -> {new_email}")
        st.session_state.current_user = user
        SessionManager.update_activity()

    @staticmethod
    def is_signed_in() -> bool:
        return bool(st.session_state.get('current_user'))

    @staticmethod
    def add_flash(level: str, message: str):
        """
        Queue a message to show after the next rerun (e.g. "Space created"
        after navigating back to the list).

        Args:
            level: One of success, info, warning, error
            message: Text to display
        """
        messages = st.session_state.get('flash_messages') or []
        messages.append({'level': level, 'message': message})
        st.session_state.flash_messages = messages

    @staticmethod
    def pop_flashes() -> List[Dict[str, str]]:
        """Return queued flash messages and clear the queue."""
        messages = st.session_state.get('flash_messages') or []
        st.session_state.flash_messages = []
        return messages

    @staticmethod
    def clear_form_state(form_key: str):
        """Drop every widget value that belongs to a form."""
        prefix = f"{form_key}:"
        stale = [key for key in list(st.session_state.keys())
                 if isinstance(key, str) and key.startswith(prefix)]
        for key in stale:
            del st.session_state[key]
        if stale:
            logger.debug(f"Cleared {len(stale)} state keys for form {form_key}")

    @staticmethod
    def update_activity():
        """Update last activity timestamp."""
        st.session_state.last_activity = datetime.now()

    @staticmethod
    def get_session_id() -> str:
        """Get the session ID."""
        return st.session_state.get('session_id', 'unknown')

    @staticmethod
    def reset_session():
        """Reset the entire session state, keeping the signed-in user."""
        logger.info(f"Resetting session: {SessionManager.get_session_id()}")

        user = SessionManager.get_current_user()

        for key in list(st.session_state.keys()):
            del st.session_state[key]

        SessionManager.initialize()
        st.session_state.current_user = user
