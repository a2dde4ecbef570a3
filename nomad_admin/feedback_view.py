"""
Community feedback page: read-only table with a detail dialog and delete.
"""

import streamlit as st
from typing import Dict, Any
import logging

from .feedback_hooks import FeedbackHook
from .page_components import (
    confirm_delete, format_date, list_toolbar, paginate, show_hook_error, table_header, truncate
)

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 100


class FeedbackView:
    """Renders the community feedback table."""

    @staticmethod
    def render():
        hook = FeedbackHook()
        entries = hook.list()
        if entries is None:
            show_hook_error(hook, "Error loading feedback")
            return

        if list_toolbar("👥 Community Feedback", len(entries), key="feedback"):
            st.rerun()

        if not entries:
            st.info("No feedback yet.")
            return

        widths = [2, 1.5, 5, 2, 1.2]
        table_header(["Name", "Country", "Message", "Date", ""], widths)

        for entry in paginate(entries, "feedback"):
            cols = st.columns(widths)
            with cols[0]:
                st.markdown(f"👤 **{entry.get('name') or 'Anonymous'}**")
            with cols[1]:
                st.write(entry.get('country') or "-")
            with cols[2]:
                st.write(truncate(entry.get('message'), MESSAGE_PREVIEW_LENGTH) or "-")
            with cols[3]:
                st.write(format_date(entry.get('created_at'), with_time=True))
            with cols[4]:
                FeedbackView._render_actions(hook, entry)

    @staticmethod
    def _render_actions(hook: FeedbackHook, entry: Dict[str, Any]):
        entry_id = entry.get('id')
        col1, col2 = st.columns(2)
        with col1:
            if st.button("👁️", key=f"feedback:view:{entry_id}", help="View"):
                FeedbackView._show_detail_dialog(entry)
        with col2:
            if st.button("🗑️", key=f"feedback:delete:{entry_id}", help="Delete"):
                confirm_delete(hook, entry_id, f"feedback from {entry.get('name') or 'Anonymous'}")

    @staticmethod
    def _show_detail_dialog(entry: Dict[str, Any]):
        @st.dialog("💬 Feedback", width="large")
        def detail_dialog():
            st.markdown(f"**From:** {entry.get('name') or 'Anonymous'}")
            st.markdown(f"**Country:** {entry.get('country') or '-'}")
            st.markdown(f"**Submitted:** {format_date(entry.get('created_at'), with_time=True)}")
            st.divider()
            st.write(entry.get('message') or "")
            if st.button("Close", type="primary", width='stretch'):
                st.rerun()

        detail_dialog()


def render_feedback():
    FeedbackView.render()
