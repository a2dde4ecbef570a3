"""
Event pages: table, create and edit.
"""

import streamlit as st
from typing import Dict, Any
import logging

from .event_hooks import EventHook
from .page_components import (
    back_button, confirm_delete, format_date, list_toolbar, paginate,
    render_create_form, render_edit_form, row_actions, show_hook_error, table_header
)
from .session_manager import SessionManager
from .ui_feedback import Notify, StatusIndicators

logger = logging.getLogger(__name__)


def event_dates(event: Dict[str, Any]) -> str:
    """Display date range of an event, e.g. "Jan 10, 2025 - Jan 12, 2025"."""
    start = format_date(event.get('start_date'))
    end = format_date(event.get('end_date'))
    if end == "-" or end == start:
        return start
    return f"{start} - {end}"


class EventViews:
    """Renders the event list, create and edit pages."""

    @staticmethod
    def render_list():
        hook = EventHook()
        events = hook.list()
        if events is None:
            show_hook_error(hook, "Could not load events")
            return

        if list_toolbar("📅 Events", len(events), "➕ New event", "event_new", key="events"):
            st.rerun()

        if not events:
            st.info("No events yet.")
            return

        widths = [3, 2.5, 2, 1, 1.2, 1.2]
        table_header(["Title", "Dates", "Location", "Online", "Status", ""], widths)

        for event in paginate(events, "events"):
            cols = st.columns(widths)
            with cols[0]:
                st.markdown(f"**{event.get('title') or '-'}**")
            with cols[1]:
                st.write(event_dates(event))
            with cols[2]:
                st.write(event.get('location') or "-")
            with cols[3]:
                st.write(StatusIndicators.boolean_indicator(bool(event.get('is_online'))))
            with cols[4]:
                st.markdown(StatusIndicators.status_badge(event.get('status')), unsafe_allow_html=True)
            with cols[5]:
                row_actions(hook, event, event.get('title') or "this event", edit_page="event_edit")

    @staticmethod
    def render_create():
        render_create_form("event", EventHook(), "events")

    @staticmethod
    def render_edit():
        event_id = SessionManager.get_current_record_id()
        if event_id is None:
            Notify.warn("No event selected")
            SessionManager.navigate("events")
            st.rerun()

        hook = EventHook()
        event = hook.get(event_id)
        if event is None:
            show_hook_error(hook, "Could not load event")
            back_button("events", "← Back to events", key="event_edit:back_missing")
            return

        col1, col2 = st.columns([4, 1])
        with col1:
            st.header(f"✏️ {event.get('title') or 'Event'}")
            st.caption(f"{event_dates(event)} · {event.get('location') or '-'}")
        with col2:
            back_button("events", "← Back to events", key="event_edit:back")
            if st.button("🗑️ Delete event", key="event_edit:delete"):
                confirm_delete(hook, event_id, event.get('title') or "this event", next_page="events")

        render_edit_form("event", hook, event)


def render_event_list():
    EventViews.render_list()


def render_event_create():
    EventViews.render_create()


def render_event_edit():
    EventViews.render_edit()
