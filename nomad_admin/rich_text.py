"""
Rich text (HTML) editing backed by the Quill editor component.
"""

import logging
from typing import Optional

import streamlit as st
from streamlit_quill import st_quill

logger = logging.getLogger(__name__)

# bold/italic/underline, headings, lists, alignment
TOOLBAR = [
    ["bold", "italic", "underline"],
    [{"header": [1, 2, 3, False]}],
    [{"list": "ordered"}, {"list": "bullet"}],
    [{"align": []}],
    ["clean"],
]

EMPTY_DOCUMENTS = {"", "<p><br></p>", "<p></p>"}


def normalize_html(value: Optional[str]) -> str:
    """Treat Quill's empty document markup as an empty string."""
    if value is None:
        return ""
    return "" if value.strip() in EMPTY_DOCUMENTS else value


def render_rich_text(label: str, state_key: str, editor_key: str,
                     placeholder: Optional[str] = None, help_text: Optional[str] = None) -> str:
    """
    Render the rich text editor for one field.

    Args:
        label: Field label
        state_key: Session state key holding the field's HTML
        editor_key: Component key; changing it remounts the editor with the
            current state value
        placeholder: Placeholder text
        help_text: Caption shown under the label

    Returns:
        Current HTML content
    """
    st.markdown(f"**{label}**")
    if help_text:
        st.caption(help_text)

    content = st_quill(
        value=st.session_state.get(state_key) or "",
        placeholder=placeholder or "Start writing...",
        html=True,
        toolbar=TOOLBAR,
        key=editor_key,
    )

    # The component returns None until the editor has mounted
    if content is not None:
        st.session_state[state_key] = normalize_html(content)

    return st.session_state.get(state_key) or ""
