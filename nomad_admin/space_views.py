"""
Space pages: the space table, the create page and the edit page with its
offers, nearby attractions and image gallery sections.
"""

import streamlit as st
from typing import Dict, Any, Optional
import logging

from .amenities import format_amenity
from .field_loader import load_fields
from .form_generator import FormGenerator
from .image_gallery import ImageGallery
from .model_builder import model_defaults
from .page_components import (
    back_button, confirm_delete, list_toolbar, paginate, render_create_form,
    render_edit_form, row_actions, show_hook_error, table_header
)
from .session_manager import SessionManager
from .space_hooks import SpaceHook, OfferHook, AttractionHook, SpaceChildHook
from .ui_feedback import Notify, StatusIndicators
from .validation_schemas import FORM_MODELS, SPACE_TYPES_WITH_OFFERS

logger = logging.getLogger(__name__)


def space_type_label(space_type: Optional[str]) -> str:
    if not space_type:
        return "-"
    return space_type.replace('_', ' ').title()


class SpaceViews:
    """Renders the space list, create and edit pages."""

    @staticmethod
    def render_list():
        hook = SpaceHook()
        spaces = hook.list()
        if spaces is None:
            show_hook_error(hook, "Could not load spaces")
            return

        if list_toolbar("🏢 Spaces", len(spaces), "➕ New space", "space_new", key="spaces"):
            st.rerun()

        if not spaces:
            st.info("No spaces yet. Create the first one with **New space**.")
            return

        widths = [1, 3, 2, 2, 3, 1.2, 1.2]
        table_header(["", "Name", "Type", "Location", "Amenities", "Status", ""], widths)

        for space in paginate(spaces, "spaces"):
            SpaceViews._render_row(hook, space, widths)

    @staticmethod
    def _render_row(hook: SpaceHook, space: Dict[str, Any], widths):
        cols = st.columns(widths)
        with cols[0]:
            url = hook.public_url(space.get('image'))
            if url:
                st.image(url, width=64)
            else:
                st.markdown("🏢")
        with cols[1]:
            st.markdown(f"**{space.get('name') or '-'}**")
            if space.get('short_description'):
                st.caption(space['short_description'])
        with cols[2]:
            st.write(space_type_label(space.get('space_type')))
        with cols[3]:
            st.write(space.get('location') or "-")
        with cols[4]:
            labels = [format_amenity(a) for a in (space.get('amenities') or [])]
            st.markdown(StatusIndicators.tag_badges(labels) or "-", unsafe_allow_html=True)
        with cols[5]:
            st.markdown(StatusIndicators.status_badge(space.get('status')), unsafe_allow_html=True)
        with cols[6]:
            row_actions(hook, space, space.get('name') or "this space", edit_page="space_edit")

    @staticmethod
    def render_create():
        render_create_form("space", SpaceHook(), "spaces", edit_page="space_edit")

    @staticmethod
    def render_edit():
        space_id = SessionManager.get_current_record_id()
        if space_id is None:
            Notify.warn("No space selected")
            SessionManager.navigate("spaces")
            st.rerun()

        hook = SpaceHook()
        space = hook.get(space_id)
        if space is None:
            show_hook_error(hook, "Could not load space")
            back_button("spaces", "← Back to spaces", key="space_edit:back_missing")
            return

        col1, col2 = st.columns([4, 1])
        with col1:
            st.header(f"✏️ {space.get('name') or 'Space'}")
            st.markdown(StatusIndicators.status_badge(space.get('status')), unsafe_allow_html=True)
        with col2:
            back_button("spaces", "← Back to spaces", key="space_edit:back")
            if st.button("🗑️ Delete space", key="space_edit:delete"):
                confirm_delete(hook, space_id, space.get('name') or "this space", next_page="spaces")

        SpaceViews._render_summary(space)

        details, attractions, offers, gallery = st.tabs(["📝 Details", "📍 Attractions", "💼 Offers", "🖼️ Gallery"])
        with details:
            render_edit_form("space", hook, space, key_prefix="space_edit")
        with attractions:
            SpaceViews._render_children(space_id, AttractionHook(), "attraction", SpaceViews._attraction_caption)
        with offers:
            if space.get('space_type') in SPACE_TYPES_WITH_OFFERS:
                SpaceViews._render_children(space_id, OfferHook(), "offer", SpaceViews._offer_caption)
            else:
                st.info(f"Offers are only available for "
                        f"{' and '.join(space_type_label(t) for t in SPACE_TYPES_WITH_OFFERS)} spaces.")
        with gallery:
            ImageGallery.render(space_id)

    @staticmethod
    def _render_summary(space: Dict[str, Any]):
        """Location and contact details of the stored record."""
        with st.expander("📍 Location & contact", expanded=False):
            col1, col2 = st.columns(2)
            with col1:
                st.markdown(f"**Location:** {space.get('location') or '-'}")
                st.markdown(f"**Address:** {space.get('address') or '-'}")
                if space.get('latitude') is not None and space.get('longitude') is not None:
                    st.markdown(f"**Coordinates:** {space['latitude']}, {space['longitude']}")
                hours = [space.get('opening_time'), space.get('closing_time')]
                if any(hours):
                    st.markdown(f"**Hours:** {str(hours[0] or '?')[:5]} - {str(hours[1] or '?')[:5]}")
            with col2:
                st.markdown(f"**Email:** {space.get('contact_email') or '-'}")
                st.markdown(f"**Phone:** {space.get('contact_phone') or '-'}")
                st.markdown(f"**WhatsApp:** {space.get('whatsapp') or '-'}")
                links = [f"[{name}]({space[name]})" for name in ('website', 'instagram', 'facebook')
                         if space.get(name)]
                st.markdown(f"**Links:** {' · '.join(links) if links else '-'}")

    @staticmethod
    def _attraction_caption(row: Dict[str, Any]) -> str:
        parts = [f"{row.get('distance_km', 0)} km"]
        if row.get('category'):
            parts.append(row['category'].title())
        return " · ".join(parts)

    @staticmethod
    def _offer_caption(row: Dict[str, Any]) -> str:
        price = row.get('price')
        parts = [f"{price if price is not None else '-'} {row.get('currency') or 'USD'}"]
        if row.get('capacity') is not None:
            parts.append(f"{row['capacity']} people")
        parts.append("Available" if row.get('available', True) else "Unavailable")
        return " · ".join(parts)

    @staticmethod
    def _render_children(space_id: Any, hook: SpaceChildHook, form_name: str, caption):
        """List, add, edit and delete the rows of one child table."""
        rows = hook.list_for_space(space_id)
        if rows is None:
            show_hook_error(hook, f"Could not load {hook.plural}")
            return

        if not rows:
            st.caption(f"No {hook.plural} yet.")

        for row in rows:
            with st.container(border=True):
                col1, col2 = st.columns([5, 1])
                with col1:
                    st.markdown(f"**{row.get('name') or '-'}**")
                    st.caption(caption(row))
                    if row.get('description'):
                        st.write(row['description'])
                with col2:
                    if st.button("🗑️", key=f"{hook.table}:delete:{row.get('id')}", help="Delete"):
                        confirm_delete(hook, row.get('id'), row.get('name') or f"this {hook.entity_name}")
                with st.expander(f"Edit {hook.entity_name}"):
                    render_edit_form(form_name, hook, row, key_prefix=f"{form_name}_edit")

        st.subheader(f"Add {hook.entity_name}")
        SpaceViews._render_child_create(space_id, hook, form_name)

    @staticmethod
    def _render_child_create(space_id: Any, hook: SpaceChildHook, form_name: str):
        model_class = FORM_MODELS[form_name]
        form_key = f"{form_name}_new:{space_id}"

        row = FormGenerator.render_form(
            form_key,
            load_fields(form_name),
            model_class,
            model_defaults(model_class),
            lambda instance: hook.create(space_id, instance),
            submit_label=f"Add {hook.entity_name}",
            is_loading=hook.is_loading
        )

        show_hook_error(hook)

        if row:
            SessionManager.clear_form_state(form_key)
            SessionManager.add_flash('success', f"{hook.entity_name.capitalize()} added")
            st.rerun()


def render_space_list():
    SpaceViews.render_list()


def render_space_create():
    SpaceViews.render_create()


def render_space_edit():
    SpaceViews.render_edit()
