"""
Building blocks shared by the entity pages: list tables, confirmation
dialogs and the create/edit form flows.
"""

import streamlit as st
import pandas as pd
from datetime import date, datetime
from typing import Dict, Any, List, Optional, Callable, Sequence
import logging

from dateutil import parser as date_parser

from .config_loader import get_config_value
from .data_hooks import EntityHook, BaseHook
from .diff_utils import calculate_changes, changed_values, has_changes, format_changes_for_display
from .field_config import FieldConfig, field_names
from .field_loader import load_fields, get_form_title
from .form_generator import FormGenerator
from .model_builder import is_blank, model_defaults, validate_form_data
from .session_manager import SessionManager
from .ui_feedback import Notify, UserFeedback
from .validation_schemas import FORM_MODELS

logger = logging.getLogger(__name__)

DATE_DISPLAY_FORMAT = "%b %d, %Y"
DATETIME_DISPLAY_FORMAT = "%b %d, %Y, %I:%M %p"


def format_date(value: Any, with_time: bool = False) -> str:
    """
    Display form of a stored date or timestamp, e.g. "Jan 10, 2025" or
    "Jan 10, 2025, 09:30 AM". Missing values give "-", unreadable ones are
    shown as they are.
    """
    if is_blank(value):
        return "-"
    if isinstance(value, (date, datetime)):
        parsed = value
    else:
        try:
            parsed = date_parser.isoparse(str(value).strip())
        except (ValueError, OverflowError):
            logger.debug(f"Unreadable date value: {value!r}")
            return str(value)
    if with_time and isinstance(parsed, datetime):
        return parsed.strftime(DATETIME_DISPLAY_FORMAT)
    return parsed.strftime(DATE_DISPLAY_FORMAT)


def truncate(text: Optional[str], limit: int = 100) -> str:
    if not text:
        return ""
    text = str(text)
    return text if len(text) <= limit else text[:limit] + "..."


def show_hook_error(hook: BaseHook, context: Optional[str] = None) -> bool:
    """Show the hook's last error as a banner. Returns True if there was one."""
    if not hook.error:
        return False
    UserFeedback.error(f"{context}: {hook.error}" if context else hook.error)
    return True


def open_confirm_dialog(title: str, message: str, on_confirm: Callable[[], Optional[str]],
                        key: str, confirm_label: str = "🗑️ Delete"):
    """
    Open a modal asking to confirm a destructive action.

    Args:
        title: Dialog title
        message: Warning shown in the dialog
        on_confirm: Runs the action; returns an error message or None
        key: Unique prefix for the dialog's buttons
        confirm_label: Text of the confirm button
    """
    @st.dialog(title)
    def _confirm_dialog():
        st.warning(f"⚠️ {message}")

        col1, col2 = st.columns([1, 1])
        with col1:
            if st.button(confirm_label, type="primary", key=f"{key}:confirm", width='stretch'):
                error = on_confirm()
                if error:
                    st.error(error)
                else:
                    st.rerun()
        with col2:
            if st.button("Cancel", key=f"{key}:cancel", width='stretch'):
                st.rerun()

    _confirm_dialog()


def delete_record(hook: BaseHook, record_id: Any, next_page: Optional[str] = None) -> Optional[str]:
    """
    Delete a record and queue a flash message.

    Returns:
        None on success, otherwise the error to show in the dialog
    """
    if hook.delete(record_id):
        SessionManager.add_flash('success', f"{hook.entity_name.capitalize()} deleted")
        if next_page:
            SessionManager.navigate(next_page)
        return None
    return hook.error or f"Failed to delete {hook.entity_name}"


def confirm_delete(hook: BaseHook, record_id: Any, label: str, next_page: Optional[str] = None):
    open_confirm_dialog(
        f"Delete {hook.entity_name}",
        f"Delete \"{label}\"? This cannot be undone.",
        lambda: delete_record(hook, record_id, next_page),
        key=f"delete:{hook.table}:{record_id}"
    )


# --- tables ---------------------------------------------------------------

def paginate(rows: Sequence[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """Slice rows to the current page, rendering a page selector when needed."""
    page_size = int(get_config_value('ui', 'page_size', 25) or 25)
    total_pages = max(1, -(-len(rows) // page_size))
    if total_pages == 1:
        return list(rows)

    page = st.number_input(
        f"Page (1-{total_pages})",
        min_value=1,
        max_value=total_pages,
        value=1,
        step=1,
        key=f"{key}:page"
    )
    start = (int(page) - 1) * page_size
    return list(rows[start:start + page_size])


def table_header(labels: Sequence[str], widths: Sequence[float]):
    columns = st.columns(list(widths))
    for column, label in zip(columns, labels):
        with column:
            st.markdown(f"**{label}**")
    st.divider()


def list_toolbar(title: str, count: int, new_label: Optional[str] = None,
                 new_page: Optional[str] = None, key: str = "list") -> bool:
    """
    Header line of a list page with the record count and a "New" button.

    Returns:
        True if the refresh button was pressed
    """
    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        st.header(title)
        st.caption(f"{count} total")
    with col2:
        refresh = st.button("🔄 Refresh", key=f"{key}:refresh", width='stretch')
    with col3:
        if new_page and st.button(new_label or "➕ New", key=f"{key}:new", type="primary", width='stretch'):
            SessionManager.navigate(new_page)
            st.rerun()
    return refresh


def row_actions(hook: BaseHook, record: Dict[str, Any], label: str, edit_page: Optional[str] = None):
    """Edit and Delete buttons for one table row."""
    record_id = record.get('id')
    col1, col2 = st.columns(2)
    with col1:
        if edit_page and st.button("✏️", key=f"{hook.table}:edit:{record_id}", help="Edit"):
            SessionManager.navigate(edit_page, record_id)
            st.rerun()
    with col2:
        if st.button("🗑️", key=f"{hook.table}:delete:{record_id}", help="Delete"):
            confirm_delete(hook, record_id, label)


def back_button(page: str, label: str = "← Back", key: str = "back"):
    if st.button(label, key=key):
        SessionManager.navigate(page)
        st.rerun()


# --- forms ----------------------------------------------------------------

def _load_form(form_name: str):
    return load_fields(form_name), FORM_MODELS[form_name]


def render_create_form(form_name: str, hook: EntityHook, list_page: str,
                       edit_page: Optional[str] = None):
    """
    Render the create form for an entity.

    Args:
        form_name: Field document and model name (space, event, blog, ...)
        hook: Hook performing the insert
        list_page: Page to open after creating, unless edit_page is given
        edit_page: Page to open with the new record's id after creating
    """
    fields, model_class = _load_form(form_name)
    form_key = f"{form_name}_new"

    st.header(f"➕ New {get_form_title(form_name)}")
    back_button(list_page, key=f"{form_key}:back")

    row = FormGenerator.render_form(
        form_key,
        fields,
        model_class,
        model_defaults(model_class),
        hook.create,
        submit_label=f"Create {hook.entity_name}",
        public_url_resolver=hook.public_url,
        is_loading=hook.is_loading
    )

    show_hook_error(hook)

    if row:
        SessionManager.clear_form_state(form_key)
        SessionManager.add_flash('success', f"{hook.entity_name.capitalize()} created")
        if edit_page:
            SessionManager.navigate(edit_page, row.get('id'))
        else:
            SessionManager.navigate(list_page)
        st.rerun()


def _pending_changes(form_key: str, fields: List[FieldConfig], model_class,
                     record: Dict[str, Any], defaults: Dict[str, Any]) -> Optional[Dict[str, Dict[str, Any]]]:
    """Changes the current widget values would make, or None while they are invalid."""
    values = FormGenerator.collect_form_values(form_key, fields, defaults)
    instance, errors = validate_form_data(model_class, values)
    if instance is None:
        return None
    return calculate_changes(record, instance.model_dump(), fields=field_names(fields))


def render_changes_preview(changes: Optional[Dict[str, Dict[str, Any]]], fields: List[FieldConfig]):
    """Before/after table of the fields that would be saved."""
    with st.expander("🔍 Changes preview", expanded=bool(changes)):
        if changes is None:
            st.info("Fix the highlighted fields to preview changes.")
            return
        if not has_changes(changes):
            st.caption("No changes")
            return
        labels = {f.name: f.label for f in fields}
        df = pd.DataFrame(format_changes_for_display(changes, labels))
        st.dataframe(df, hide_index=True, width='stretch')


def render_edit_form(form_name: str, hook: EntityHook, record: Dict[str, Any],
                     submit_label: str = "Save changes", key_prefix: Optional[str] = None):
    """
    Render the edit form for a stored record. Only changed fields are sent
    as a partial update.

    Args:
        form_name: Field document and model name
        hook: Hook performing the update
        record: Stored record (its values are the form defaults)
        submit_label: Submit button text
        key_prefix: Form key prefix (defaults to "<form_name>_edit")
    """
    fields, model_class = _load_form(form_name)
    form_key = f"{key_prefix or form_name + '_edit'}:{record.get('id')}"
    defaults = {field.name: record.get(field.name) for field in fields}

    def _save(instance):
        changes = calculate_changes(record, instance.model_dump(), fields=field_names(fields))
        if not has_changes(changes):
            return {'changes': {}, 'row': None}
        row = hook.update(record.get('id'), changed_values(changes))
        return {'changes': changes, 'row': row}

    result = FormGenerator.render_form(
        form_key,
        fields,
        model_class,
        defaults,
        _save,
        submit_label=submit_label,
        public_url_resolver=hook.public_url,
        is_loading=hook.is_loading
    )

    render_changes_preview(_pending_changes(form_key, fields, model_class, record, defaults), fields)

    show_hook_error(hook)

    if result is None:
        return
    if not has_changes(result["changes"]):
        Notify.info("No changes to save")
    elif result["row"]:
        SessionManager.add_flash('success', f"{hook.entity_name.capitalize()} updated "
                                            f"({len(result['changes'])} field(s))")
        st.rerun()
