"""
Tag picker widget.

The selection is an ordered list with set semantics. The pure helpers below
implement the selection rules; ``render_tag_picker`` wires them to Streamlit
widgets inside a modal dialog.
"""

import streamlit as st
from typing import Callable, List, Optional, Tuple
import logging

from .amenities import format_amenity, get_amenity_config, get_amenities_by_category
from .field_config import FieldConfig

logger = logging.getLogger(__name__)


def add_tag(selection: List[str], text: str) -> Tuple[List[str], Optional[str]]:
    """
    Add a free-text entry to the selection.

    Args:
        selection: Current selection
        text: Raw text typed by the user (trimmed before use)

    Returns:
        (new_selection, error) where error is None when the entry was added
    """
    tag = (text or "").strip()
    if not tag:
        return list(selection), "Tag cannot be empty"
    if tag in selection:
        return list(selection), f"'{tag}' is already selected"
    return list(selection) + [tag], None


def remove_tag(selection: List[str], tag: str) -> List[str]:
    """Remove an entry; removing an absent entry leaves the selection unchanged."""
    return [item for item in selection if item != tag]


def toggle_tag(selection: List[str], tag: str) -> List[str]:
    """Select a vocabulary entry, or deselect it when it is already selected."""
    if tag in selection:
        return remove_tag(selection, tag)
    return list(selection) + [tag]


def available_tags(options: List[str], selection: List[str]) -> List[str]:
    """Vocabulary entries that are not selected yet, in vocabulary order."""
    return [option for option in options if option not in selection]


def custom_tags(options: List[str], selection: List[str]) -> List[str]:
    """Selected entries that are not part of the vocabulary."""
    return [tag for tag in selection if tag not in options]


def available_groups(field: FieldConfig, selection: List[str]) -> List[Tuple[Optional[str], List[str]]]:
    """
    Unselected vocabulary entries as (heading, entries) groups. Amenities are
    grouped by category, entries without a category end up in a last group
    without heading. Other pickers get one group without heading.
    """
    remaining = available_tags(field.tag_options, selection)
    if field.name != "amenities":
        return [(None, remaining)] if remaining else []

    groups: List[Tuple[Optional[str], List[str]]] = []
    grouped = set()
    for category, amenities in get_amenities_by_category().items():
        names = [amenity.name for amenity in amenities if amenity.name in remaining]
        grouped.update(names)
        if names:
            groups.append((category, names))
    leftover = [tag for tag in remaining if tag not in grouped]
    if leftover:
        groups.append((None, leftover))
    return groups


def label_function(field: FieldConfig) -> Callable[[str], str]:
    """Display function for a picker's entries (amenities get icon and label)."""
    if field.name == "amenities":
        return format_amenity
    return str


def _on_toggle(state_key: str, tag: str) -> None:
    st.session_state[state_key] = toggle_tag(st.session_state.get(state_key) or [], tag)


def _on_remove(state_key: str, tag: str) -> None:
    st.session_state[state_key] = remove_tag(st.session_state.get(state_key) or [], tag)


def _on_add(state_key: str) -> None:
    text_key = f"{state_key}:new_tag"
    error_key = f"{state_key}:add_error"
    selection, error = add_tag(st.session_state.get(state_key) or [], st.session_state.get(text_key, ""))
    st.session_state[state_key] = selection
    st.session_state[error_key] = error
    if error is None:
        st.session_state[text_key] = ""


def _render_dialog_body(field: FieldConfig, state_key: str, format_func: Callable[[str], str]) -> None:
    selection = st.session_state.get(state_key) or []

    st.markdown("**Selected**")
    if not selection:
        st.caption("Nothing selected yet")
    custom = custom_tags(field.tag_options, selection)
    for tag in selection:
        col_label, col_remove = st.columns([5, 1])
        with col_label:
            st.write(f"{format_func(tag)} _(custom)_" if tag in custom else format_func(tag))
        with col_remove:
            st.button("✕", key=f"{state_key}:remove:{tag}", on_click=_on_remove, args=(state_key, tag),
                      help=f"Remove {tag}")

    st.markdown("**Add your own**")
    col_text, col_add = st.columns([4, 1])
    with col_text:
        st.text_input("New tag", key=f"{state_key}:new_tag", label_visibility="collapsed",
                      placeholder=field.placeholder or "Type a tag")
    with col_add:
        st.button("Add", key=f"{state_key}:add", on_click=_on_add, args=(state_key,))
    add_error = st.session_state.get(f"{state_key}:add_error")
    if add_error:
        st.caption(f"⚠️ {add_error}")

    st.markdown("**Available**")
    groups = available_groups(field, selection)
    if not groups:
        st.caption("All options are selected")
    for heading, tags in groups:
        if heading:
            st.caption(heading.replace("_", " ").title())
        for tag in tags:
            config = get_amenity_config(tag) if field.name == "amenities" else None
            st.button(format_func(tag), key=f"{state_key}:toggle:{tag}", on_click=_on_toggle,
                      args=(state_key, tag), help=config.description if config else None,
                      width="stretch")

    if st.button("Done", key=f"{state_key}:done", type="primary"):
        st.rerun()


def render_tag_picker(field: FieldConfig, state_key: str) -> List[str]:
    """
    Render the selected tags and a button that opens the picker dialog.

    Args:
        field: Field descriptor (tag_options hold the vocabulary)
        state_key: Session state key holding the selection list

    Returns:
        Current selection
    """
    if not isinstance(st.session_state.get(state_key), list):
        st.session_state[state_key] = []

    format_func = label_function(field)
    selection = st.session_state[state_key]

    st.markdown(f"**{field.label}**")
    if selection:
        st.write(" · ".join(format_func(tag) for tag in selection))
    else:
        st.caption(field.placeholder or "No tags selected")

    @st.dialog(f"Select {field.label.rstrip(' *')}")
    def _picker_dialog():
        _render_dialog_body(field, state_key, format_func)

    if st.button(f"Edit {field.label.rstrip(' *').lower()}", key=f"{state_key}:open"):
        logger.debug(f"Opening tag picker for {state_key}")
        _picker_dialog()

    return list(st.session_state[state_key])
