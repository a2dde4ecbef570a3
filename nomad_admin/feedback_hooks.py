"""
Hook for community feedback. Feedback is submitted by the public site, so the
admin side can only read and delete it.
"""

from .data_hooks import BaseHook


class FeedbackHook(BaseHook):
    table = "feedback"
    order_by = "created_at"
    order_desc = True
    entity_name = "feedback entry"
    entity_plural = "feedback entries"
