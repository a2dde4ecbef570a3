"""
UI feedback utilities for the Nomad admin app.
Provides loading indicators, toast notifications and status badges.
"""

import streamlit as st
from typing import Optional, Dict, List
from contextlib import contextmanager
import logging

logger = logging.getLogger(__name__)


class LoadingIndicator:
    """Loading indicator utilities."""

    @staticmethod
    @contextmanager
    def spinner(message: str = "Loading..."):
        """Context manager for spinner loading indicator."""
        with st.spinner(message):
            yield


class UserFeedback:
    """Inline feedback messages."""

    @staticmethod
    def success(message: str, celebration: bool = False):
        """Show success message with optional celebration."""
        st.success(f"✅ {message}")

        if celebration:
            st.balloons()

    @staticmethod
    def info(message: str, icon: str = "ℹ️"):
        st.info(f"{icon} {message}")

    @staticmethod
    def warning(message: str, icon: str = "⚠️"):
        st.warning(f"{icon} {message}")

    @staticmethod
    def error(message: str, icon: str = "❌"):
        st.error(f"{icon} {message}")

    @staticmethod
    def show_flashes(messages: List[Dict[str, str]]):
        """Render queued flash messages (see SessionManager.add_flash)."""
        for item in messages:
            level = item.get('level', 'info')
            message = item.get('message', '')
            if level == 'success':
                UserFeedback.success(message)
            elif level == 'warning':
                UserFeedback.warning(message)
            elif level == 'error':
                UserFeedback.error(message)
            else:
                UserFeedback.info(message)


class Notify:
    """
    Toast notification helper.

    The API includes: success, info, warn, error, once.

    Usage:
    Notify.success("Space saved")
    Notify.once("Backend not configured", notification_type="warning", key="cfg_warned")
    """

    ICONS = {
        'success': '✅',
        'info': 'ℹ️',
        'warning': '⚠️',
        'error': '❌'
    }

    @staticmethod
    def _display_notification(message: str, notification_type: str = 'info') -> None:
        """Internal method to display notification based on type."""
        icon = Notify.ICONS.get(notification_type, 'ℹ️')

        try:
            st.toast(message, icon=icon)
        except Exception as e:
            logger.error(f"Error using st.toast: {e}", exc_info=True)
            full_message = f"{icon} {message}"
            if notification_type == 'success':
                st.success(full_message)
            elif notification_type == 'warning':
                st.warning(full_message)
            elif notification_type == 'error':
                st.error(full_message)
            else:
                st.info(full_message)

    @staticmethod
    def success(message: str) -> None:
        """Show success notification."""
        Notify._display_notification(message, 'success')

    @staticmethod
    def info(message: str) -> None:
        """Show info notification."""
        Notify._display_notification(message, 'info')

    @staticmethod
    def warn(message: str) -> None:
        """Show warning notification."""
        Notify._display_notification(message, 'warning')

    @staticmethod
    def error(message: str) -> None:
        """Show error notification."""
        Notify._display_notification(message, 'error')

    @staticmethod
    def once(message: str, notification_type: str = 'info', key: str = 'default_once') -> bool:
        """
        Show notification only once per session for the given key.
        Returns True if shown, False if already shown.
        """
        if key not in st.session_state:
            st.session_state[key] = False
        if not st.session_state[key]:
            Notify._display_notification(message, notification_type)
            st.session_state[key] = True
            return True
        return False


class StatusIndicators:
    """Status indicators and badges rendered as inline HTML."""

    STATUS_COLORS = {
        'published': '#28a745',
        'draft': '#6c757d',
        'archived': '#dc3545',
    }

    STATUS_ICONS = {
        'published': '🟢',
        'draft': '📝',
        'archived': '📦',
    }

    @staticmethod
    def _pill(text: str, color: str) -> str:
        return (f'<span style="background-color: {color}; color: white; padding: 2px 8px; '
                f'border-radius: 12px; font-size: 0.8em; margin-right: 4px;">{text}</span>')

    @staticmethod
    def status_badge(status: Optional[str]) -> str:
        """Create a badge for a content status (draft, published, archived)."""
        status = (status or 'draft').lower()
        color = StatusIndicators.STATUS_COLORS.get(status, '#6c757d')
        icon = StatusIndicators.STATUS_ICONS.get(status, '📋')
        return StatusIndicators._pill(f"{icon} {status.title()}", color)

    @staticmethod
    def tag_badges(tags: Optional[List[str]], limit: int = 3, color: str = '#17a2b8') -> str:
        """
        Create badges for the first ``limit`` tags followed by a "+N more"
        badge for the remainder.
        """
        tags = list(tags or [])
        badges = [StatusIndicators._pill(str(tag), color) for tag in tags[:limit]]
        remaining = len(tags) - limit
        if remaining > 0:
            badges.append(StatusIndicators._pill(f"+{remaining} more", '#adb5bd'))
        return "".join(badges)

    @staticmethod
    def boolean_indicator(value: bool, true_label: str = "Yes", false_label: str = "No") -> str:
        return f"🟢 {true_label}" if value else f"⚪ {false_label}"


# Convenience functions
def show_loading(message: str = "Loading..."):
    """Show loading spinner."""
    return LoadingIndicator.spinner(message)
