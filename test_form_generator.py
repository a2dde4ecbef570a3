"""
Unit tests for the generic form renderer.
"""

from datetime import date, time
from unittest.mock import patch, MagicMock
import pytest
from pydantic import BaseModel

from nomad_admin.field_config import FieldConfig
from nomad_admin.field_loader import load_fields
from nomad_admin.form_generator import FormGenerator, WIDGET_RENDERERS
from nomad_admin.model_builder import OptionalInt, required_text, model_defaults
from nomad_admin.validation_schemas import FORM_MODELS

from test_fixtures import FakeUploadedFile, MockSessionState


class _TinyModel(BaseModel):
    name: required_text("Name is required")
    capacity: OptionalInt = None


TINY_FIELDS = [
    FieldConfig(name="name", label="Name *", widget="input"),
    FieldConfig(name="capacity", label="Capacity", widget="input", input_type="number"),
]


class TestHydrateValue:
    """Stored values are converted to what each widget holds."""

    def test_number_inputs(self):
        field = FieldConfig(name="capacity", label="Capacity", widget="input", input_type="number")
        assert FormGenerator.hydrate_value(field, None) == ""
        assert FormGenerator.hydrate_value(field, 12.0) == "12"
        assert FormGenerator.hydrate_value(field, 2.5) == "2.5"
        assert FormGenerator.hydrate_value(field, 7) == "7"

    def test_time_inputs(self):
        field = FieldConfig(name="opening_time", label="Opening", widget="input", input_type="time")
        assert FormGenerator.hydrate_value(field, "09:30:00") == time(9, 30)
        assert FormGenerator.hydrate_value(field, "07:05") == time(7, 5)
        assert FormGenerator.hydrate_value(field, "not a time") is None
        assert FormGenerator.hydrate_value(field, None) is None

    def test_date_inputs(self):
        field = FieldConfig(name="start_date", label="Start", widget="date")
        assert FormGenerator.hydrate_value(field, "2025-01-10") == date(2025, 1, 10)
        assert FormGenerator.hydrate_value(field, "2025-01-10T08:00:00+00:00") == date(2025, 1, 10)
        assert FormGenerator.hydrate_value(field, "garbage") is None
        assert FormGenerator.hydrate_value(field, "") is None

    def test_choice_inputs(self):
        field = FieldConfig(name="status", label="Status", widget="dropdown",
                            options=["draft", "published", "archived"])
        assert FormGenerator.hydrate_value(field, "draft") == "draft"
        assert FormGenerator.hydrate_value(field, "Published") == "published"
        assert FormGenerator.hydrate_value(field, "deleted") is None
        assert FormGenerator.hydrate_value(field, None) is None

    def test_other_inputs(self):
        tags = FieldConfig(name="tags", label="Tags", widget="tagpicker", tag_options=["a"])
        checkbox = FieldConfig(name="is_online", label="Online", widget="checkbox")
        image = FieldConfig(name="image", label="Image", widget="file")
        text = FieldConfig(name="title", label="Title", widget="input")

        assert FormGenerator.hydrate_value(tags, None) == []
        assert FormGenerator.hydrate_value(tags, ("a", "b")) == ["a", "b"]
        assert FormGenerator.hydrate_value(checkbox, None) is False
        assert FormGenerator.hydrate_value(image, "abc.png") == "abc.png"
        assert FormGenerator.hydrate_value(image, "") is None
        assert FormGenerator.hydrate_value(text, None) == ""

    def test_every_widget_kind_has_a_renderer(self):
        assert set(WIDGET_RENDERERS) == {
            "input", "textarea", "dropdown", "radio", "checkbox", "date", "tagpicker", "tiptap", "file"
        }


class TestFormState:
    """Session state hydration and reset on new defaults."""

    def setup_method(self):
        self.state = MockSessionState()

    def test_initialize_writes_defaults_once(self):
        with patch("streamlit.session_state", self.state):
            assert FormGenerator.initialize_state("f", TINY_FIELDS, {'name': "Hub", 'capacity': 10}) is True
            assert self.state["f:name"] == "Hub"
            assert self.state["f:capacity"] == "10"
            assert FormGenerator.get_version("f") == 0

            self.state["f:name"] = "Edited"
            assert FormGenerator.initialize_state("f", TINY_FIELDS, {'name': "Hub", 'capacity': 10}) is False
            assert self.state["f:name"] == "Edited"

    def test_new_defaults_reset_the_form(self):
        with patch("streamlit.session_state", self.state):
            FormGenerator.initialize_state("f", TINY_FIELDS, {'name': "Hub", 'capacity': 10})
            self.state["f:name"] = "Unsaved edit"
            FormGenerator.set_errors("f", {'name': "Name is required"})

            assert FormGenerator.initialize_state("f", TINY_FIELDS, {'name': "Hub 2", 'capacity': 10}) is True

            assert self.state["f:name"] == "Hub 2"
            assert FormGenerator.get_version("f") == 1
            assert FormGenerator.get_errors("f") == {}
            assert FormGenerator.upload_key("f", "image") == "f:image:upload:1"

    def test_forms_are_scoped_by_key(self):
        with patch("streamlit.session_state", self.state):
            FormGenerator.initialize_state("space_edit:1", TINY_FIELDS, {'name': "One"})
            FormGenerator.initialize_state("space_edit:2", TINY_FIELDS, {'name': "Two"})

            assert self.state["space_edit:1:name"] == "One"
            assert self.state["space_edit:2:name"] == "Two"

    def test_fingerprint_is_content_based(self):
        a = FormGenerator.defaults_fingerprint({'b': 1, 'a': [1, 2], 'd': date(2025, 1, 10)})
        b = FormGenerator.defaults_fingerprint({'a': [1, 2], 'd': date(2025, 1, 10), 'b': 1})
        c = FormGenerator.defaults_fingerprint({'a': [2, 1], 'd': date(2025, 1, 10), 'b': 1})
        assert a == b
        assert a != c

    def test_collect_form_values(self):
        fields = [
            FieldConfig(name="opening_time", label="Opening", widget="input", input_type="time"),
            FieldConfig(name="image", label="Image", widget="file"),
            FieldConfig(name="video", label="Video", widget="file", file_kind="video"),
        ]
        upload = FakeUploadedFile("new.png")
        with patch("streamlit.session_state", self.state):
            FormGenerator.initialize_state("f", fields, {'image': "old.png", 'video': "clip.mp4"})
            self.state["f:opening_time"] = time(8, 15)
            self.state[FormGenerator.upload_key("f", "image")] = upload

            values = FormGenerator.collect_form_values("f", fields, {'id': "space-1", 'image': "old.png"})

        assert values['opening_time'] == "08:15"
        assert values['image'] is upload
        assert values['video'] == "clip.mp4"
        assert values['id'] == "space-1"


class TestProcessSubmission:

    def test_valid_submission_calls_callback_with_instance(self):
        on_submit = MagicMock(return_value={'id': 1})

        ok, errors, result = FormGenerator.process_submission(_TinyModel, {'name': "Hub", 'capacity': "3"}, on_submit)

        assert ok is True
        assert errors == {}
        assert result == {'id': 1}
        instance = on_submit.call_args[0][0]
        assert instance.capacity == 3

    def test_invalid_submission_blocks_callback(self):
        on_submit = MagicMock()

        ok, errors, result = FormGenerator.process_submission(_TinyModel, {'name': "", 'capacity': "abc"}, on_submit)

        assert ok is False
        assert errors == {'name': "Name is required", 'capacity': "Expected a number"}
        assert result is None
        on_submit.assert_not_called()

    def test_async_callback_is_awaited(self):
        async def on_submit(instance):
            return {'name': instance.name}

        ok, errors, result = FormGenerator.process_submission(_TinyModel, {'name': "Hub"}, on_submit)

        assert ok is True
        assert result == {'name': "Hub"}

    @pytest.mark.parametrize("form_name,expected", [
        ("space", {"name", "short_description", "location"}),
        ("event", {"title", "start_date", "location"}),
        ("blog", {"name", "content", "tags"}),
        ("offer", {"name"}),
        ("attraction", {"name"}),
    ])
    def test_submitting_defaults_reports_exactly_the_failing_fields(self, form_name, expected):
        model_class = FORM_MODELS[form_name]
        fields = load_fields(form_name)
        defaults = model_defaults(model_class)
        state = MockSessionState()

        with patch("streamlit.session_state", state):
            FormGenerator.initialize_state(f"{form_name}_new", fields, defaults)
            values = FormGenerator.collect_form_values(f"{form_name}_new", fields, defaults)

        ok, errors, _ = FormGenerator.process_submission(model_class, values, MagicMock())

        assert ok is False
        assert set(errors) == expected


class TestRenderForm:
    """render_form with the Streamlit widgets mocked out."""

    def setup_method(self):
        self.state = MockSessionState()
        self.placeholders = []

    def _empty(self):
        placeholder = MagicMock()
        self.placeholders.append(placeholder)
        return placeholder

    @patch('streamlit.error')
    @patch('streamlit.button', return_value=True)
    @patch('streamlit.text_input')
    def test_invalid_submit_shows_inline_errors(self, mock_text_input, mock_button, mock_error):
        on_submit = MagicMock()
        with patch("streamlit.session_state", self.state), patch('streamlit.empty', side_effect=self._empty):
            result = FormGenerator.render_form("f", TINY_FIELDS, _TinyModel, {'name': "", 'capacity': "abc"},
                                               on_submit, submit_label="Save")

            assert FormGenerator.get_errors("f") == {'name': "Name is required", 'capacity': "Expected a number"}

        assert result is None
        on_submit.assert_not_called()
        self.placeholders[0].error.assert_called_once_with("Name is required", icon="⚠️")
        self.placeholders[1].error.assert_called_once_with("Expected a number", icon="⚠️")
        assert mock_text_input.call_count == 2

    @patch('streamlit.button', return_value=True)
    @patch('streamlit.text_input')
    def test_valid_submit_returns_callback_result(self, mock_text_input, mock_button):
        with patch("streamlit.session_state", self.state), patch('streamlit.empty', side_effect=self._empty):
            result = FormGenerator.render_form("f", TINY_FIELDS, _TinyModel, {'name': "Hub", 'capacity': 4},
                                               lambda instance: {'saved': instance.capacity})

            assert FormGenerator.get_errors("f") == {}

        assert result == {'saved': 4}
        for placeholder in self.placeholders:
            placeholder.error.assert_not_called()

    @patch('streamlit.button')
    @patch('streamlit.text_input')
    def test_loading_disables_submit(self, mock_text_input, mock_button):
        mock_button.return_value = False
        with patch("streamlit.session_state", self.state), patch('streamlit.empty', side_effect=self._empty):
            FormGenerator.render_form("f", TINY_FIELDS, _TinyModel, {}, MagicMock(), is_loading=True)

        args, kwargs = mock_button.call_args
        assert args[0] == "Saving..."
        assert kwargs['disabled'] is True
