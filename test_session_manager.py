"""
Unit tests for session_manager module.
"""

from unittest.mock import patch

from nomad_admin.session_manager import SessionManager, NAV_PAGES, SUB_PAGES, DEFAULT_PAGE

from test_fixtures import MockSessionState


class TestSessionManager:
    """Routing, user and flash message state."""

    def setup_method(self):
        self.state = MockSessionState()
        self.patcher = patch("streamlit.session_state", self.state)
        self.patcher.start()
        SessionManager.initialize()

    def teardown_method(self):
        self.patcher.stop()

    def test_initialize_defaults(self):
        assert self.state['current_page'] == DEFAULT_PAGE
        assert self.state['current_record_id'] is None
        assert self.state['flash_messages'] == []
        assert self.state['session_id'].startswith("session_")

    def test_initialize_keeps_existing_values(self):
        self.state['current_page'] = 'events'
        SessionManager.initialize()
        assert self.state['current_page'] == 'events'

    def test_navigate_with_record(self):
        SessionManager.navigate('space_edit', 'spaces-1')

        assert SessionManager.get_current_page() == 'space_edit'
        assert SessionManager.get_current_record_id() == 'spaces-1'
        assert SessionManager.get_nav_section() == 'spaces'

    def test_navigate_to_top_level_clears_record(self):
        SessionManager.navigate('event_edit', 'events-1')
        SessionManager.navigate('events')

        assert SessionManager.get_current_record_id() is None
        assert SessionManager.get_nav_section() == 'events'

    def test_unknown_page_falls_back_to_dashboard(self):
        SessionManager.navigate('reports', 'x')

        assert SessionManager.get_current_page() == DEFAULT_PAGE
        assert SessionManager.get_current_record_id() is None

    def test_sub_pages_belong_to_sidebar_entries(self):
        assert set(SUB_PAGES.values()) <= set(NAV_PAGES)

    def test_flashes_survive_until_popped(self):
        SessionManager.add_flash('success', "Space created")
        SessionManager.add_flash('error', "Upload failed")

        assert SessionManager.pop_flashes() == [
            {'level': 'success', 'message': "Space created"},
            {'level': 'error', 'message': "Upload failed"},
        ]
        assert SessionManager.pop_flashes() == []

    def test_clear_form_state_only_touches_prefix(self):
        self.state['space_new:name'] = "Hub"
        self.state['space_new:__version'] = 2
        self.state['space_new_other'] = "keep"
        self.state['event_new:title'] = "keep"

        SessionManager.clear_form_state('space_new')

        assert 'space_new:name' not in self.state
        assert 'space_new:__version' not in self.state
        assert self.state['space_new_other'] == "keep"
        assert self.state['event_new:title'] == "keep"

    def test_user_sign_in_state(self):
        assert SessionManager.is_signed_in() is False

        SessionManager.set_current_user({'id': 'u1', 'email': "admin@nomad.life"})
        assert SessionManager.is_signed_in() is True

        SessionManager.set_current_user(None)
        assert SessionManager.get_current_user() is None

    def test_reset_session_keeps_user(self):
        user = {'id': 'u1', 'email': "admin@nomad.life"}
        SessionManager.set_current_user(user)
        SessionManager.navigate('blog_edit', 'blog-1')
        self.state['blog_edit:blog-1:name'] = "Draft"

        SessionManager.reset_session()

        assert SessionManager.get_current_user() == user
        assert SessionManager.get_current_page() == DEFAULT_PAGE
        assert 'blog_edit:blog-1:name' not in self.state
