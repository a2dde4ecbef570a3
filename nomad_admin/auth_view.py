"""
Email/password sign-in against the backend's auth API.
"""

import streamlit as st
from typing import Dict, Any, Optional, Tuple
import logging

from .data_hooks import get_client
from .error_handler import extract_error_message
from .session_manager import SessionManager
from .ui_feedback import show_loading

logger = logging.getLogger(__name__)


def sign_in(client: Any, email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Sign in with email and password.

    Returns:
        (user, None) on success, (None, message) on failure
    """
    if not email.strip() or not password:
        return None, "Email and password are required"

    try:
        response = client.auth.sign_in_with_password({"email": email.strip(), "password": password})
    except Exception as e:
        message = extract_error_message(e, "Sign in failed")
        logger.warning(f"Sign in failed for {email.strip()}: {message}")
        return None, message

    user = getattr(response, 'user', None)
    if user is None:
        return None, "Sign in failed"

    logger.info(f"Signed in: {getattr(user, 'email', email)}")
    return {'id': getattr(user, 'id', None), 'email': getattr(user, 'email', email.strip())}, None


def sign_out(client: Any) -> None:
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.warning(f"Sign out failed: {extract_error_message(e)}")
    SessionManager.set_current_user(None)


class AuthView:
    """Sign-in page shown before any other page when auth is enabled."""

    @staticmethod
    def render():
        _, center, _ = st.columns([1, 2, 1])
        with center:
            st.title("🌍 Nomad Life")
            st.caption("Digital Nomad Community Platform")

            with st.form("sign_in_form"):
                email = st.text_input("Email", placeholder="admin@example.com")
                password = st.text_input("Password", type="password")
                submitted = st.form_submit_button("Sign in", type="primary", width='stretch')

            if submitted:
                with show_loading("Signing in..."):
                    user, error = sign_in(get_client(), email, password)
                if error:
                    st.error(error)
                else:
                    SessionManager.set_current_user(user)
                    SessionManager.navigate("dashboard")
                    st.rerun()


def render_sign_in():
    AuthView.render()
