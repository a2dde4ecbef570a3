"""
Error handling utilities for the Nomad admin app.
Turns backend and storage failures into readable messages and shows
unexpected page-level failures with recovery options.
"""

import streamlit as st
import logging
import traceback
from typing import Dict, Any, Optional, Callable, List

from .session_manager import SessionManager

logger = logging.getLogger(__name__)


class ErrorType:
    """Error type constants."""
    BACKEND = "backend"
    STORAGE = "storage"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    AUTH = "auth"
    SYSTEM = "system"


def extract_error_message(error: Any, fallback: str = "An unexpected error occurred") -> str:
    """
    Pull a human readable message out of whatever the backend raised.

    The REST client raises APIError carrying a ``message`` attribute (and
    sometimes ``details``/``hint``), the storage client raises exceptions
    whose ``message`` is a plain string or a dict, and transport errors are
    plain exceptions.

    Args:
        error: Exception (or error payload) to describe
        fallback: Message used when nothing usable can be found

    Returns:
        Non-empty message string
    """
    if error is None:
        return fallback

    if isinstance(error, dict):
        for key in ('message', 'error_description', 'error', 'msg'):
            value = error.get(key)
            if value:
                return str(value)
        return fallback

    message = getattr(error, 'message', None)
    if isinstance(message, dict):
        return extract_error_message(message, fallback)
    if message:
        return str(message)

    text = str(error).strip()
    return text or fallback


class ErrorHandler:
    """Error handling for page-level failures."""

    @staticmethod
    def handle_error(
        error: Exception,
        context: str,
        error_type: str = ErrorType.SYSTEM,
        user_message: Optional[str] = None,
        recovery_options: Optional[List[Dict[str, Any]]] = None,
        show_details: bool = False
    ) -> None:
        """
        Handle errors with user-friendly messages and recovery options.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            error_type: Type of error (from ErrorType constants)
            user_message: Custom user-friendly message
            recovery_options: List of recovery actions
            show_details: Whether to show technical details
        """
        logger.error(f"Error in {context}: {str(error)}", exc_info=True)

        if not user_message:
            user_message = ErrorHandler._get_user_friendly_message(error, error_type)

        ErrorHandler._display_error(
            user_message,
            error,
            context,
            recovery_options,
            show_details
        )

    @staticmethod
    def _get_user_friendly_message(error: Exception, error_type: str) -> str:
        """Generate user-friendly error messages based on error type."""
        error_messages = {
            ErrorType.BACKEND: {
                "default": "🗄️ The database request failed. Please try again."
            },
            ErrorType.STORAGE: {
                "default": "🖼️ The file could not be stored. Please try again."
            },
            ErrorType.VALIDATION: {
                ValueError: "✅ Some values are invalid. Please review the form.",
                TypeError: "✅ Invalid data type provided. Please check your input.",
                "default": "✅ Validation error occurred. Please review your data and try again."
            },
            ErrorType.CONFIGURATION: {
                "default": "⚙️ The application is not configured correctly. Check config.yaml."
            },
            ErrorType.NETWORK: {
                ConnectionError: "🌐 Could not reach the backend. Please check your connection.",
                TimeoutError: "⏱️ Request timed out. Please try again.",
                "default": "🌐 Network error occurred. Please check your connection and try again."
            },
            ErrorType.AUTH: {
                PermissionError: "🔐 You don't have permission to perform this action.",
                "default": "🔐 Sign-in failed. Please check your credentials."
            },
            ErrorType.SYSTEM: {
                MemoryError: "💻 System is running low on memory. Please try again.",
                ImportError: "💻 Required system component is missing. Please contact support.",
                "default": "💻 Unexpected error occurred. Please try again or contact support."
            }
        }

        error_type_messages = error_messages.get(error_type, error_messages[ErrorType.SYSTEM])

        for exception_type, message in error_type_messages.items():
            if exception_type != "default" and isinstance(error, exception_type):
                return message

        return error_type_messages.get("default", "An unexpected error occurred.")

    @staticmethod
    def _display_error(
        user_message: str,
        error: Exception,
        context: str,
        recovery_options: Optional[List[Dict[str, Any]]] = None,
        show_details: bool = False
    ) -> None:
        """Display error message to user with recovery options."""
        st.error(user_message)

        if recovery_options:
            st.subheader("🔧 Suggested Actions:")

            for i, option in enumerate(recovery_options):
                col1, col2 = st.columns([3, 1])

                with col1:
                    st.write(f"**{option['title']}**")
                    st.write(option['description'])

                with col2:
                    if st.button(option['button_text'], key=f"recovery_{context}_{i}"):
                        if 'action' in option and callable(option['action']):
                            try:
                                option['action']()
                            except Exception as e:
                                st.error(f"Recovery action failed: {str(e)}")

        with st.expander("🔍 Technical Details", expanded=show_details):
            st.write(f"**Error Type:** {type(error).__name__}")
            st.write(f"**Context:** {context}")
            st.write(f"**Error Message:** {extract_error_message(error)}")
            suggestions = getattr(error, 'recovery_suggestions', None)
            if suggestions:
                for suggestion in suggestions:
                    st.write(f"• {suggestion}")
            st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))

    @staticmethod
    def with_error_handling(
        func: Callable,
        context: str,
        error_type: str = ErrorType.SYSTEM,
        user_message: Optional[str] = None,
        recovery_options: Optional[List[Dict[str, Any]]] = None,
        show_details: bool = False,
        default_return: Any = None
    ) -> Any:
        """
        Decorator-like function to wrap operations with error handling.

        Args:
            func: Function to execute
            context: Context description
            error_type: Type of error expected
            user_message: Custom user message
            recovery_options: Recovery actions
            show_details: Show technical details
            default_return: Value to return on error

        Returns:
            Function result or default_return on error
        """
        try:
            return func()
        except Exception as e:
            ErrorHandler.handle_error(
                e, context, error_type, user_message, recovery_options, show_details
            )
            return default_return

    @staticmethod
    def create_recovery_options(context: str) -> List[Dict[str, Any]]:
        """Create context-specific recovery options."""
        recovery_options: List[Dict[str, Any]] = []

        if "config" in context.lower():
            recovery_options.append({
                'title': 'Reload Configuration',
                'description': 'Re-read config.yaml and the environment',
                'button_text': '⚙️ Reload',
                'action': lambda: ErrorHandler._reload_configuration()
            })

        recovery_options.extend([
            {
                'title': 'Back to Dashboard',
                'description': 'Leave this page and return to the dashboard',
                'button_text': '🏠 Dashboard',
                'action': lambda: ErrorHandler._go_home()
            },
            {
                'title': 'Restart Session',
                'description': 'Clear all session data and start fresh',
                'button_text': '🔄 Restart',
                'action': lambda: ErrorHandler._restart_session()
            }
        ])

        return recovery_options

    @staticmethod
    def _reload_configuration() -> None:
        from .config_loader import reload_config
        reload_config()
        st.cache_resource.clear()
        st.rerun()

    @staticmethod
    def _go_home() -> None:
        SessionManager.navigate("dashboard")
        st.rerun()

    @staticmethod
    def _restart_session() -> None:
        """Restart the user session."""
        try:
            SessionManager.reset_session()
            st.success("🔄 Session restarted successfully")
            st.rerun()
        except Exception as e:
            st.error(f"Failed to restart session: {str(e)}")


# Convenience functions
def with_error_handling(func: Callable, context: str, **kwargs) -> Any:
    """Convenience function for wrapping operations with error handling."""
    return ErrorHandler.with_error_handling(func, context, **kwargs)
