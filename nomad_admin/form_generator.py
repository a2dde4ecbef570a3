"""
Generic form renderer for the Nomad admin app.

A form is an ordered list of FieldConfig descriptors plus a validation model.
Each field's value lives in ``st.session_state`` under ``"<form_key>:<field>"``;
the renderer hydrates those keys from the defaults mapping, renders the widget
for each field kind, validates on submit and hands the coerced model instance
to the page's submit callback.
"""

import asyncio
import hashlib
import inspect
import json
import streamlit as st
from datetime import datetime, date, time
from typing import Dict, Any, List, Optional, Callable, Tuple, Type
import logging

from pydantic import BaseModel

from .field_config import FieldConfig
from .model_builder import TIME_PATTERN, parse_date_value, validate_form_data
from .rich_text import render_rich_text
from .storage import is_pending_upload
from .tag_picker import render_tag_picker

logger = logging.getLogger(__name__)

# (path, bucket) -> public URL, supplied by the page
PublicUrlResolver = Callable[[str, Optional[str]], Optional[str]]

IMAGE_UPLOAD_TYPES = ["jpg", "jpeg", "png", "webp"]
VIDEO_UPLOAD_TYPES = ["mp4", "webm", "mov"]


class FormGenerator:
    """Renders forms from field descriptors and handles submission."""

    # --- session state keys -------------------------------------------

    @staticmethod
    def state_key(form_key: str, field_name: str) -> str:
        return f"{form_key}:{field_name}"

    @staticmethod
    def _meta_key(form_key: str, name: str) -> str:
        return f"{form_key}:__{name}"

    @staticmethod
    def get_version(form_key: str) -> int:
        """Reset counter of a form; widget keys that cannot be written through
        session state (uploader, editor) include it so a reset remounts them."""
        return st.session_state.get(FormGenerator._meta_key(form_key, "version"), 0)

    @staticmethod
    def upload_key(form_key: str, field_name: str) -> str:
        version = FormGenerator.get_version(form_key)
        return f"{FormGenerator.state_key(form_key, field_name)}:upload:{version}"

    @staticmethod
    def get_errors(form_key: str) -> Dict[str, str]:
        return st.session_state.get(FormGenerator._meta_key(form_key, "errors")) or {}

    @staticmethod
    def set_errors(form_key: str, errors: Dict[str, str]) -> None:
        st.session_state[FormGenerator._meta_key(form_key, "errors")] = dict(errors)

    # --- hydration ----------------------------------------------------

    @staticmethod
    def defaults_fingerprint(defaults: Dict[str, Any]) -> str:
        """
        Content hash of a defaults mapping. Streamlit rebuilds the mapping on
        every rerun, so identity cannot tell whether the defaults changed.
        """
        def _encode(value: Any) -> str:
            if isinstance(value, (datetime, date, time)):
                return value.isoformat()
            if is_pending_upload(value):
                return f"upload:{getattr(value, 'name', '')}:{getattr(value, 'size', '')}"
            return repr(value)

        payload = json.dumps(defaults, sort_keys=True, default=_encode)
        return hashlib.sha256(payload.encode('utf-8')).hexdigest()

    @staticmethod
    def hydrate_value(field: FieldConfig, value: Any) -> Any:
        """
        Convert a stored/default value into what the field's widget holds.

        Args:
            field: Field descriptor
            value: Value from the defaults mapping

        Returns:
            Widget state value
        """
        widget = field.widget

        if field.is_numeric:
            if value is None or (isinstance(value, str) and not value.strip()):
                return ""
            if isinstance(value, float) and value.is_integer():
                return str(int(value))
            return str(value)

        if widget == "input" and field.input_type == "time":
            if isinstance(value, time):
                return value
            if isinstance(value, str):
                match = TIME_PATTERN.match(value.strip())
                if match:
                    try:
                        return time(int(match.group(1)), int(match.group(2)))
                    except ValueError:
                        pass
                if value.strip():
                    logger.warning(f"Failed to parse time '{value}' for field '{field.name}'")
            return None

        if widget == "date":
            try:
                return parse_date_value(value)
            except (ValueError, OverflowError) as e:
                logger.warning(f"Failed to parse date '{value}' for field '{field.name}': {e}")
                return None

        if widget == "checkbox":
            return bool(value)

        if widget == "tagpicker":
            if isinstance(value, (list, tuple)):
                return [str(item) for item in value]
            return []

        if widget in ("dropdown", "radio"):
            if value in field.options:
                return value
            if isinstance(value, str):
                # Older records store capitalized choices ("Published")
                matches = [option for option in field.options if option.lower() == value.strip().lower()]
                if matches:
                    return matches[0]
            return None

        if widget == "file":
            return value if isinstance(value, str) and value.strip() else None

        # input (text/email/url), textarea, tiptap
        return "" if value is None else str(value)

    @staticmethod
    def initialize_state(form_key: str, fields: List[FieldConfig], defaults: Dict[str, Any]) -> bool:
        """
        Write the defaults into the form's state keys on first render and
        whenever the defaults change; unsaved edits are discarded then.

        Returns:
            True if the state was (re)initialized
        """
        fingerprint_key = FormGenerator._meta_key(form_key, "fingerprint")
        fingerprint = FormGenerator.defaults_fingerprint(defaults)

        if st.session_state.get(fingerprint_key) == fingerprint:
            return False

        first_render = fingerprint_key not in st.session_state
        for field in fields:
            st.session_state[FormGenerator.state_key(form_key, field.name)] = \
                FormGenerator.hydrate_value(field, defaults.get(field.name))

        st.session_state[fingerprint_key] = fingerprint
        version_key = FormGenerator._meta_key(form_key, "version")
        st.session_state[version_key] = st.session_state.get(version_key, 0) + (0 if first_render else 1)
        FormGenerator.set_errors(form_key, {})

        logger.debug(f"Form '{form_key}' {'initialized' if first_render else 'reset to new defaults'}")
        return True

    # --- collection and submission ------------------------------------

    @staticmethod
    def _state_to_value(form_key: str, field: FieldConfig) -> Any:
        value = st.session_state.get(FormGenerator.state_key(form_key, field.name))

        if field.widget == "input" and field.input_type == "time":
            if isinstance(value, (time, datetime)):
                return value.strftime('%H:%M')
            return value

        if field.widget == "file":
            upload = st.session_state.get(FormGenerator.upload_key(form_key, field.name))
            if upload is not None:
                return upload
            return value

        if field.widget == "tagpicker":
            return list(value or [])

        return value

    @staticmethod
    def collect_form_values(form_key: str, fields: List[FieldConfig], defaults: Dict[str, Any]) -> Dict[str, Any]:
        """
        Current form values: the defaults mapping overlaid with every
        configured field's widget value.
        """
        values = dict(defaults)
        for field in fields:
            values[field.name] = FormGenerator._state_to_value(form_key, field)
        return values

    @staticmethod
    def process_submission(
        model_class: Type[BaseModel],
        values: Dict[str, Any],
        on_submit: Callable[[BaseModel], Any]
    ) -> Tuple[bool, Dict[str, str], Any]:
        """
        Validate values and run the submit callback.

        Args:
            model_class: Validation model
            values: Collected form values
            on_submit: Callback receiving the coerced instance; coroutine
                functions are awaited

        Returns:
            (submitted, field_errors, callback_result)
        """
        instance, errors = validate_form_data(model_class, values)
        if instance is None:
            return False, errors, None

        result = on_submit(instance)
        if inspect.isawaitable(result):
            result = asyncio.run(FormGenerator._await(result))

        return True, {}, result

    @staticmethod
    async def _await(awaitable):
        return await awaitable

    # --- rendering ----------------------------------------------------

    @staticmethod
    def render_form(
        form_key: str,
        fields: List[FieldConfig],
        model_class: Type[BaseModel],
        defaults: Dict[str, Any],
        on_submit: Callable[[BaseModel], Any],
        submit_label: str = "Submit",
        public_url_resolver: Optional[PublicUrlResolver] = None,
        is_loading: bool = False
    ) -> Optional[Any]:
        """
        Render a form and handle its submission.

        Args:
            form_key: Unique key scoping the form's session state
            fields: Ordered field descriptors
            model_class: Validation model run on submit
            defaults: Initial values (a change resets the form)
            on_submit: Submit callback (plain or coroutine function)
            submit_label: Submit button text
            public_url_resolver: Resolves stored file paths for previews
            is_loading: Disables the submit button while a request runs

        Returns:
            The callback's result when a valid submission happened, else None
        """
        FormGenerator.initialize_state(form_key, fields, defaults)

        errors = FormGenerator.get_errors(form_key)
        placeholders: Dict[str, Any] = {}

        for field in fields:
            FormGenerator._render_field(form_key, field, public_url_resolver)
            placeholders[field.name] = st.empty()

        submitted = st.button(
            "Saving..." if is_loading else submit_label,
            key=FormGenerator._meta_key(form_key, "submit"),
            type="primary",
            disabled=is_loading
        )

        result = None
        if submitted:
            values = FormGenerator.collect_form_values(form_key, fields, defaults)
            ok, errors, result = FormGenerator.process_submission(model_class, values, on_submit)
            FormGenerator.set_errors(form_key, errors)
            if ok:
                logger.info(f"Form '{form_key}' submitted")
            else:
                logger.info(f"Form '{form_key}' has {len(errors)} invalid field(s)")

        for field_name, message in errors.items():
            if field_name in placeholders:
                placeholders[field_name].error(message, icon="⚠️")

        unknown = [name for name in errors if name not in placeholders]
        if unknown:
            for name in unknown:
                st.error(f"{name}: {errors[name]}")

        return result

    @staticmethod
    def _render_field(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> Any:
        """Render a single field through the widget dispatch table."""
        try:
            renderer = WIDGET_RENDERERS.get(field.widget)
            if renderer is None:
                logger.warning(f"No renderer for widget '{field.widget}', using text input")
                renderer = FormGenerator._render_text_input
            return renderer(form_key, field, resolver)
        except Exception as e:
            st.error(f"Error rendering field {field.name}: {str(e)}")
            logger.error(f"Error rendering field {field.name}: {e}", exc_info=True)
            with st.expander("Error Details"):
                st.code(str(e))
            return st.session_state.get(FormGenerator.state_key(form_key, field.name))

    @staticmethod
    def _render_text_input(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> Any:
        key = FormGenerator.state_key(form_key, field.name)

        if field.input_type == "time":
            return st.time_input(field.label, key=key, value=None, step=300, help=field.description)

        return st.text_input(
            field.label,
            key=key,
            placeholder=field.placeholder,
            help=field.description
        )

    @staticmethod
    def _render_text_area(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> str:
        return st.text_area(
            field.label,
            key=FormGenerator.state_key(form_key, field.name),
            placeholder=field.placeholder,
            help=field.description,
            height=100
        )

    @staticmethod
    def _render_selectbox(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> Any:
        return st.selectbox(
            field.label,
            options=field.options,
            key=FormGenerator.state_key(form_key, field.name),
            index=None,
            placeholder=field.placeholder or "-- Select --",
            help=field.description
        )

    @staticmethod
    def _render_radio(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> Any:
        return st.radio(
            field.label,
            options=field.options,
            key=FormGenerator.state_key(form_key, field.name),
            index=None,
            horizontal=True,
            help=field.description
        )

    @staticmethod
    def _render_checkbox(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> bool:
        return st.checkbox(
            field.label,
            key=FormGenerator.state_key(form_key, field.name),
            help=field.description
        )

    @staticmethod
    def _render_date_input(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> Optional[date]:
        return st.date_input(
            field.label,
            key=FormGenerator.state_key(form_key, field.name),
            value=None,
            format="YYYY-MM-DD",
            help=field.description
        )

    @staticmethod
    def _render_tag_picker(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> List[str]:
        if field.description:
            st.caption(field.description)
        return render_tag_picker(field, FormGenerator.state_key(form_key, field.name))

    @staticmethod
    def _render_rich_text(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> str:
        key = FormGenerator.state_key(form_key, field.name)
        return render_rich_text(
            field.label,
            key,
            editor_key=f"{key}:editor:{FormGenerator.get_version(form_key)}",
            placeholder=field.placeholder,
            help_text=field.description
        )

    @staticmethod
    def _render_file_input(form_key: str, field: FieldConfig, resolver: Optional[PublicUrlResolver]) -> Any:
        """
        File picker with a preview of either the picked file or the stored
        one. A stored file can be cleared; the picked file wins on submit.
        """
        key = FormGenerator.state_key(form_key, field.name)
        is_video = field.file_kind == "video"

        upload = st.file_uploader(
            field.label,
            type=VIDEO_UPLOAD_TYPES if is_video else IMAGE_UPLOAD_TYPES,
            key=FormGenerator.upload_key(form_key, field.name),
            help=field.description
        )

        if upload is not None:
            if is_video:
                st.video(upload)
            else:
                st.image(upload, width=240)
            return upload

        stored_path = st.session_state.get(key)
        if stored_path:
            url = resolver(stored_path, field.bucket) if resolver else None
            if url:
                if is_video:
                    st.video(url)
                else:
                    st.image(url, width=240)
            st.caption(f"Current file: {stored_path}")
            if st.button("Remove file", key=f"{key}:clear"):
                st.session_state[key] = None
                st.rerun()

        return stored_path


# Widget kind -> renderer
WIDGET_RENDERERS: Dict[str, Callable[[str, FieldConfig, Optional[PublicUrlResolver]], Any]] = {
    "input": FormGenerator._render_text_input,
    "textarea": FormGenerator._render_text_area,
    "dropdown": FormGenerator._render_selectbox,
    "radio": FormGenerator._render_radio,
    "checkbox": FormGenerator._render_checkbox,
    "date": FormGenerator._render_date_input,
    "tagpicker": FormGenerator._render_tag_picker,
    "tiptap": FormGenerator._render_rich_text,
    "file": FormGenerator._render_file_input,
}
