"""
Blog pages: table, create and edit.
"""

import streamlit as st
from typing import Any, Optional
import logging

from .blog_hooks import BlogHook
from .model_builder import slugify
from .page_components import (
    back_button, confirm_delete, format_date, list_toolbar, paginate,
    render_create_form, render_edit_form, row_actions, show_hook_error, table_header
)
from .session_manager import SessionManager
from .ui_feedback import Notify, StatusIndicators, UserFeedback

logger = logging.getLogger(__name__)


class BlogViews:
    """Renders the blog post list, create and edit pages."""

    @staticmethod
    def render_list():
        hook = BlogHook()
        posts = hook.list()
        if posts is None:
            show_hook_error(hook, "Could not load blog posts")
            return

        if list_toolbar("📝 Blog", len(posts), "➕ New post", "blog_new", key="blog"):
            st.rerun()

        if not posts:
            st.info("No blog posts yet.")
            return

        widths = [3, 1.2, 2.5, 2, 1.5, 1.2]
        table_header(["Title", "Status", "Tags", "Slug", "Created", ""], widths)

        for post in paginate(posts, "blog"):
            cols = st.columns(widths)
            with cols[0]:
                st.markdown(f"**{post.get('name') or '-'}**")
                if post.get('time_to_read'):
                    st.caption(f"{post['time_to_read']} min read")
            with cols[1]:
                st.markdown(StatusIndicators.status_badge(post.get('status')), unsafe_allow_html=True)
            with cols[2]:
                st.markdown(StatusIndicators.tag_badges(post.get('tags')) or "-", unsafe_allow_html=True)
            with cols[3]:
                st.code(post.get('slug') or "-", language=None)
            with cols[4]:
                st.write(format_date(post.get('created_at')))
            with cols[5]:
                row_actions(hook, post, post.get('name') or "this post", edit_page="blog_edit")

    @staticmethod
    def _warn_duplicate_slug(hook: BlogHook, slug: Optional[str], own_id: Any = None):
        """Warn when another post already uses the slug typed into the form."""
        slug = slugify(slug or "")
        if not slug:
            return
        matches = hook.find_by_slug(slug)
        if matches is None:
            logger.warning(f"Slug check failed: {hook.error}")
            hook.error = None
            return
        others = [post for post in matches if post.get('id') != own_id]
        if others:
            UserFeedback.warning(f"Slug '{slug}' is already used by \"{others[0].get('name')}\"")

    @staticmethod
    def render_create():
        hook = BlogHook()
        BlogViews._warn_duplicate_slug(hook, st.session_state.get("blog_new:slug"))
        render_create_form("blog", hook, "blog")

    @staticmethod
    def render_edit():
        post_id = SessionManager.get_current_record_id()
        if post_id is None:
            Notify.warn("No blog post selected")
            SessionManager.navigate("blog")
            st.rerun()

        hook = BlogHook()
        post = hook.get(post_id)
        if post is None:
            show_hook_error(hook, "Could not load blog post")
            back_button("blog", "← Back to blog", key="blog_edit:back_missing")
            return

        col1, col2 = st.columns([4, 1])
        with col1:
            st.header(f"✏️ {post.get('name') or 'Blog post'}")
            st.caption(f"/{post.get('slug') or ''} · created {format_date(post.get('created_at'))}")
        with col2:
            back_button("blog", "← Back to blog", key="blog_edit:back")
            if st.button("🗑️ Delete post", key="blog_edit:delete"):
                confirm_delete(hook, post_id, post.get('name') or "this post", next_page="blog")

        form_slug = st.session_state.get(f"blog_edit:{post_id}:slug")
        if form_slug and slugify(form_slug) != post.get('slug'):
            BlogViews._warn_duplicate_slug(hook, form_slug, own_id=post_id)

        render_edit_form("blog", hook, post)


def render_blog_list():
    BlogViews.render_list()


def render_blog_create():
    BlogViews.render_create()


def render_blog_edit():
    BlogViews.render_edit()
