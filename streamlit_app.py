"""
Main Streamlit application for the Nomad Life admin.
Manages coworking spaces, events, blog posts and community feedback.
"""

import streamlit as st
import logging

from nomad_admin.config_loader import get_config_value, load_config, validate_config, get_config_summary


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


# Configure logging dynamically from config
try:
    log_level_str = get_config_value('logging', 'level', 'INFO')
    log_format = get_config_value('logging', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.basicConfig(level=get_logging_level(log_level_str), format=log_format)
    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured to level: {log_level_str}")
except Exception as e:
    # Fallback to INFO if config reading fails
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)
    logger.error(f"Failed to configure logging from config: {e}, using INFO level")

# Load configuration early
try:
    config = load_config()
    page_title = get_config_value('ui', 'page_title', 'Nomad Life Admin')
    app_version = get_config_value('app', 'version', 'Unknown')
    logger.info(f"Starting app version: {app_version}")
except Exception as e:
    logger.error(f"Failed to load configuration: {e}")
    config = {}
    page_title = "Nomad Life Admin"

st.set_page_config(
    page_title=page_title,
    page_icon="🌍",
    layout="wide",
    initial_sidebar_state="expanded"
)

from nomad_admin.session_manager import SessionManager, NAV_PAGES  # noqa: E402
from nomad_admin.ui_feedback import Notify, UserFeedback  # noqa: E402


def main():
    """Main application entry point."""
    from nomad_admin.error_handler import ErrorHandler, ErrorType

    try:
        SessionManager.initialize()
        check_configuration()

        if get_config_value('auth', 'enabled', False) and not SessionManager.is_signed_in():
            from nomad_admin.auth_view import render_sign_in
            render_sign_in()
            return

        render_sidebar()
        UserFeedback.show_flashes(SessionManager.pop_flashes())
        render_main_content()

    except Exception as e:
        ErrorHandler.handle_error(
            e,
            "application",
            ErrorType.SYSTEM,
            recovery_options=ErrorHandler.create_recovery_options("system")
        )


def check_configuration():
    """Warn once per session about configuration problems."""
    problems = validate_config(config)
    if problems:
        Notify.once(f"Configuration issues detected: {problems[0]}", 'warning', key='config_problems')
    logger.debug(f"Configuration summary: {get_config_summary(config)}")


def render_sidebar():
    """Render application sidebar."""
    with st.sidebar:
        app_name = get_config_value('app', 'name', 'Nomad Life Admin')
        st.title(f"🌍 {app_name}")
        st.header(get_config_value('ui', 'sidebar_title', 'Navigation'))

        pages = list(NAV_PAGES.keys())
        current_section = SessionManager.get_nav_section()

        page = st.radio(
            "Go to:",
            options=pages,
            format_func=lambda x: NAV_PAGES[x],
            index=pages.index(current_section) if current_section in pages else 0,
            label_visibility="collapsed"
        )

        if page != current_section:
            SessionManager.navigate(page)
            st.rerun()

        st.divider()

        user = SessionManager.get_current_user()
        if user:
            st.caption(f"👤 {user.get('email')}")
            if st.button("🚪 Sign out", width='stretch'):
                from nomad_admin.auth_view import sign_out
                from nomad_admin.data_hooks import get_client
                sign_out(get_client())
                st.rerun()

        st.caption(f"v{get_config_value('app', 'version', '')}")


def render_main_content():
    """Render main content area based on current page."""
    from nomad_admin.dashboard_view import render_dashboard
    from nomad_admin.space_views import render_space_list, render_space_create, render_space_edit
    from nomad_admin.event_views import render_event_list, render_event_create, render_event_edit
    from nomad_admin.blog_views import render_blog_list, render_blog_create, render_blog_edit
    from nomad_admin.feedback_view import render_feedback

    routes = {
        'dashboard': render_dashboard,
        'spaces': render_space_list,
        'space_new': render_space_create,
        'space_edit': render_space_edit,
        'events': render_event_list,
        'event_new': render_event_create,
        'event_edit': render_event_edit,
        'blog': render_blog_list,
        'blog_new': render_blog_create,
        'blog_edit': render_blog_edit,
        'feedback': render_feedback,
    }

    page = SessionManager.get_current_page()
    renderer = routes.get(page)
    if renderer is None:
        st.error(f"Unknown page: {page}")
        return

    from nomad_admin.error_handler import ErrorHandler, with_error_handling

    context = f"{page} view"
    with_error_handling(renderer, context, recovery_options=ErrorHandler.create_recovery_options(context))


if __name__ == "__main__":
    main()
