"""
Dashboard: record counts per section with shortcuts to the list pages.
"""

import streamlit as st
import logging

from .blog_hooks import BlogHook
from .event_hooks import EventHook
from .feedback_hooks import FeedbackHook
from .session_manager import SessionManager, NAV_PAGES
from .space_hooks import SpaceHook

logger = logging.getLogger(__name__)

# (page, hook class) per dashboard card, in display order
DASHBOARD_CARDS = [
    ('spaces', SpaceHook),
    ('events', EventHook),
    ('blog', BlogHook),
    ('feedback', FeedbackHook),
]


class DashboardView:

    @staticmethod
    def render():
        user = SessionManager.get_current_user() or {}
        st.header("🏠 Dashboard")
        if user.get('email'):
            st.caption(f"Signed in as {user['email']}")

        columns = st.columns(len(DASHBOARD_CARDS))
        for column, (page, hook_class) in zip(columns, DASHBOARD_CARDS):
            hook = hook_class()
            count = hook.count()
            with column:
                with st.container(border=True):
                    st.metric(NAV_PAGES[page], "-" if count is None else count)
                    if count is None:
                        st.caption(f"⚠️ {hook.error}")
                        logger.warning(f"Dashboard count for {page} failed: {hook.error}")
                    if st.button("Open", key=f"dashboard:{page}", width='stretch'):
                        SessionManager.navigate(page)
                        st.rerun()


def render_dashboard():
    DashboardView.render()
