"""
Image gallery of a space: multi-upload, alt text, reordering and delete.
"""

import streamlit as st
from typing import Dict, Any, List
import logging

from .form_generator import IMAGE_UPLOAD_TYPES
from .model_builder import validate_upload
from .page_components import delete_record, open_confirm_dialog, show_hook_error
from .session_manager import SessionManager
from .space_hooks import SpaceImageHook, move_image
from .ui_feedback import Notify, UserFeedback, show_loading

logger = logging.getLogger(__name__)

GALLERY_COLUMNS = 3


class ImageGallery:
    """Renders and edits the gallery of one space."""

    @staticmethod
    def _key(space_id: Any, name: str) -> str:
        return f"gallery:{space_id}:{name}"

    @staticmethod
    def render(space_id: Any):
        hook = SpaceImageHook()
        images = hook.list_for_space(space_id)
        if images is None:
            show_hook_error(hook, "Could not load gallery")
            return

        ImageGallery._render_uploader(hook, space_id)

        if not images:
            st.caption("No gallery images yet.")
            return

        st.caption(f"{len(images)} image(s). The first image is shown first on the public page.")
        order = [image['id'] for image in images]
        for start in range(0, len(images), GALLERY_COLUMNS):
            columns = st.columns(GALLERY_COLUMNS)
            for column, image in zip(columns, images[start:start + GALLERY_COLUMNS]):
                with column:
                    ImageGallery._render_tile(hook, space_id, image, order)

    @staticmethod
    def _render_uploader(hook: SpaceImageHook, space_id: Any):
        version_key = ImageGallery._key(space_id, "upload_version")
        version = st.session_state.get(version_key, 0)

        files = st.file_uploader(
            "Add images",
            type=IMAGE_UPLOAD_TYPES,
            accept_multiple_files=True,
            key=ImageGallery._key(space_id, f"upload:{version}")
        )
        if not files:
            return

        problems = {file.name: validate_upload(file, 'image') for file in files}
        problems = {name: message for name, message in problems.items() if message}
        for name, message in problems.items():
            st.error(f"{name}: {message}", icon="⚠️")

        valid = [file for file in files if file.name not in problems]
        if not valid:
            return

        if st.button(f"⬆️ Upload {len(valid)} image(s)", key=ImageGallery._key(space_id, "upload_btn"),
                     type="primary", disabled=hook.is_loading):
            with show_loading(f"Uploading {len(valid)} image(s)..."):
                inserted = hook.upload_images(space_id, valid)
            if len(inserted) < len(valid):
                UserFeedback.error(hook.error or "Some images could not be uploaded")
                logger.warning(f"Uploaded {len(inserted)} of {len(valid)} images for space {space_id}")
                return
            st.session_state[version_key] = version + 1
            SessionManager.add_flash('success', f"Uploaded {len(inserted)} image(s)")
            st.rerun()

    @staticmethod
    def _render_tile(hook: SpaceImageHook, space_id: Any, image: Dict[str, Any], order: List[Any]):
        image_id = image['id']
        with st.container(border=True):
            url = hook.public_url(image.get('path'))
            if url:
                st.image(url, width=220)
            else:
                st.caption(image.get('path') or "Missing file")
            st.caption(f"#{image.get('position')}")

            alt = st.text_input(
                "Alt text",
                value=image.get('alt') or "",
                key=ImageGallery._key(space_id, f"alt:{image_id}")
            )
            if (alt or None) != (image.get('alt') or None):
                if st.button("💾 Save alt text", key=ImageGallery._key(space_id, f"alt_save:{image_id}")):
                    if hook.update(image_id, {"alt": alt.strip() or None}):
                        Notify.success("Alt text saved")
                        st.rerun()
                    UserFeedback.error(hook.error or "Failed to save alt text")

            index = order.index(image_id)
            col1, col2, col3 = st.columns(3)
            with col1:
                if st.button("⬅️", key=ImageGallery._key(space_id, f"earlier:{image_id}"),
                             help="Move earlier", disabled=index == 0):
                    ImageGallery._move(hook, space_id, order, image_id, -1)
            with col2:
                if st.button("➡️", key=ImageGallery._key(space_id, f"later:{image_id}"),
                             help="Move later", disabled=index == len(order) - 1):
                    ImageGallery._move(hook, space_id, order, image_id, 1)
            with col3:
                if st.button("🗑️", key=ImageGallery._key(space_id, f"delete:{image_id}"), help="Delete"):
                    open_confirm_dialog(
                        "Delete image",
                        "Delete this image from the gallery? This cannot be undone.",
                        lambda: ImageGallery._delete(hook, space_id, image_id),
                        key=ImageGallery._key(space_id, f"confirm_delete:{image_id}")
                    )

    @staticmethod
    def _move(hook: SpaceImageHook, space_id: Any, order: List[Any], image_id: Any, offset: int):
        if hook.reorder(space_id, move_image(order, image_id, offset)):
            st.rerun()
        UserFeedback.error(hook.error or "Failed to reorder images")

    @staticmethod
    def _delete(hook: SpaceImageHook, space_id: Any, image_id: Any):
        error = delete_record(hook, image_id)
        if error is None and not hook.normalize_positions(space_id):
            logger.warning(f"Could not renumber gallery of space {space_id}: {hook.error}")
        return error
