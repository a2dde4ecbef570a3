"""
Unit tests for error_handler module.
"""

from unittest.mock import patch, MagicMock

from nomad_admin.error_handler import (
    ErrorHandler,
    ErrorType,
    extract_error_message,
    with_error_handling
)
from nomad_admin.exceptions import ConfigurationError

from test_fixtures import FakeAPIError, FakeStorageError


class TestExtractErrorMessage:
    """Messages pulled out of backend and storage failures."""

    def test_api_error_message(self):
        assert extract_error_message(FakeAPIError("duplicate key value", "23505")) == "duplicate key value"

    def test_storage_error_dict_message(self):
        error = FakeStorageError("The object exceeded the maximum allowed size", 413)
        assert extract_error_message(error) == "The object exceeded the maximum allowed size"

    def test_plain_exception(self):
        assert extract_error_message(ConnectionError("connection refused")) == "connection refused"

    def test_payload_dicts(self):
        assert extract_error_message({'error_description': "Invalid login"}) == "Invalid login"
        assert extract_error_message({'error': "Bucket not found"}) == "Bucket not found"
        assert extract_error_message({}, "Upload failed") == "Upload failed"

    def test_fallbacks(self):
        assert extract_error_message(None) == "An unexpected error occurred"
        assert extract_error_message(Exception(""), "Delete failed") == "Delete failed"

    def test_admin_error_message(self):
        assert extract_error_message(ConfigurationError("supabase.url")) == \
            "Missing required configuration value: supabase.url"


class TestErrorHandler:
    """Test class for error handler."""

    def test_get_user_friendly_message_network(self):
        message = ErrorHandler._get_user_friendly_message(ConnectionError("down"), ErrorType.NETWORK)
        assert "could not reach the backend" in message.lower()

        message = ErrorHandler._get_user_friendly_message(TimeoutError(), ErrorType.NETWORK)
        assert "timed out" in message.lower()

    def test_get_user_friendly_message_defaults(self):
        message = ErrorHandler._get_user_friendly_message(FakeAPIError("x"), ErrorType.BACKEND)
        assert "database request failed" in message.lower()

        message = ErrorHandler._get_user_friendly_message(ValueError("x"), ErrorType.VALIDATION)
        assert "review the form" in message.lower()

        message = ErrorHandler._get_user_friendly_message(RuntimeError("x"), "unknown-type")
        assert "unexpected error" in message.lower()

    @patch('streamlit.code')
    @patch('streamlit.expander')
    @patch('streamlit.error')
    @patch('streamlit.subheader')
    @patch('streamlit.write')
    def test_display_error_basic(self, mock_write, mock_subheader, mock_error, mock_expander, mock_code):
        error = ValueError("Test error")

        ErrorHandler._display_error("Test user message", error, "test context")

        mock_error.assert_called_once_with("Test user message")
        mock_subheader.assert_not_called()
        mock_write.assert_any_call("**Error Message:** Test error")

    @patch('streamlit.code')
    @patch('streamlit.expander')
    @patch('streamlit.error')
    @patch('streamlit.subheader')
    @patch('streamlit.write')
    @patch('streamlit.button')
    @patch('streamlit.columns')
    def test_display_error_with_recovery_options(self, mock_columns, mock_button, mock_write, mock_subheader,
                                                 mock_error, mock_expander, mock_code):
        action = MagicMock()
        recovery_options = [{
            'title': 'Retry',
            'description': 'Try the operation again',
            'button_text': 'Retry',
            'action': action
        }]
        mock_columns.return_value = [MagicMock(), MagicMock()]
        mock_button.return_value = True

        ErrorHandler._display_error("Test user message", ValueError("Test error"), "ctx", recovery_options)

        mock_error.assert_called_once_with("Test user message")
        mock_subheader.assert_called_once()
        mock_button.assert_called_once_with('Retry', key="recovery_ctx_0")
        action.assert_called_once()

    @patch('streamlit.code')
    @patch('streamlit.expander')
    @patch('streamlit.error')
    @patch('streamlit.write')
    def test_configuration_error_lists_suggestions(self, mock_write, mock_error, mock_expander, mock_code):
        error = ConfigurationError("supabase.key")

        ErrorHandler.handle_error(error, "startup", ErrorType.CONFIGURATION)

        assert "config.yaml" in mock_error.call_args[0][0]
        written = [call.args[0] for call in mock_write.call_args_list]
        assert any("supabase.key" in text for text in written if text.startswith("•"))

    def test_with_error_handling_success(self):
        assert ErrorHandler.with_error_handling(lambda: "ok", "test") == "ok"

    @patch('nomad_admin.error_handler.ErrorHandler.handle_error')
    def test_with_error_handling_failure(self, mock_handle_error):
        def failing():
            raise ValueError("boom")

        result = ErrorHandler.with_error_handling(failing, "test", default_return=[])

        assert result == []
        mock_handle_error.assert_called_once()
        assert isinstance(mock_handle_error.call_args[0][0], ValueError)

    def test_create_recovery_options(self):
        titles = [o['title'] for o in ErrorHandler.create_recovery_options("page render")]
        assert titles == ['Back to Dashboard', 'Restart Session']

        titles = [o['title'] for o in ErrorHandler.create_recovery_options("Configuration check")]
        assert titles[0] == 'Reload Configuration'

    @patch('nomad_admin.error_handler.SessionManager')
    @patch('streamlit.rerun')
    def test_go_home(self, mock_rerun, mock_session_manager):
        ErrorHandler._go_home()

        mock_session_manager.navigate.assert_called_once_with("dashboard")
        mock_rerun.assert_called_once()

    @patch('nomad_admin.error_handler.SessionManager')
    @patch('streamlit.success')
    @patch('streamlit.rerun')
    def test_restart_session(self, mock_rerun, mock_success, mock_session_manager):
        ErrorHandler._restart_session()

        mock_session_manager.reset_session.assert_called_once()
        mock_success.assert_called_once()
        mock_rerun.assert_called_once()

    @patch('nomad_admin.error_handler.SessionManager')
    @patch('streamlit.error')
    def test_restart_session_failure(self, mock_error, mock_session_manager):
        mock_session_manager.reset_session.side_effect = RuntimeError("state locked")

        ErrorHandler._restart_session()

        mock_error.assert_called_once_with("Failed to restart session: state locked")

    @patch('nomad_admin.error_handler.ErrorHandler.with_error_handling')
    def test_with_error_handling_convenience(self, mock_with_error_handling):
        func = MagicMock()

        with_error_handling(func, "ctx", default_return=0)

        mock_with_error_handling.assert_called_once_with(func, "ctx", default_return=0)
