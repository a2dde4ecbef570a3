"""
Hook for community events.
"""

from .data_hooks import EntityHook


class EventHook(EntityHook):
    """Events are listed by start date, earliest first."""

    table = "events"
    order_by = "start_date"
    order_desc = False
    bucket = "events"
    file_fields = ("image",)
    entity_name = "event"
