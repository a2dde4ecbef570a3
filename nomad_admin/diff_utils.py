"""
Diff utilities for the edit pages.

Compares a stored record with the values validated from the edit form, so the
page can preview field-level changes and send only the changed fields as a
partial update. Comparison runs on normalized values through DeepDiff.
"""

from typing import Dict, Any, List, Optional, Iterable
from datetime import datetime, date, time
import logging

from deepdiff import DeepDiff

from .storage import is_pending_upload

logger = logging.getLogger(__name__)

UPLOAD_MARKER = "<new upload>"


def normalize_value(value: Any) -> Any:
    """
    Normalize a value for comparison: blank strings become None, dates and
    times become ISO strings, integral floats become ints, lists are
    normalized item by item.
    """
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime('%H:%M')
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    if is_pending_upload(value):
        return f"{UPLOAD_MARKER}:{getattr(value, 'name', '')}"
    return value


def _normalize_stored(field_name: str, value: Any) -> Any:
    normalized = normalize_value(value)
    # Stored times come back as HH:MM:SS
    if isinstance(normalized, str) and field_name.endswith('_time') and len(normalized) == 8 \
            and normalized[2] == ':' and normalized[5] == ':':
        return normalized[:5]
    # Stored dates may come back with a time part
    if isinstance(normalized, str) and field_name.endswith('_date') and 'T' in normalized:
        return normalized.split('T', 1)[0]
    return normalized


def calculate_changes(original: Dict[str, Any], modified: Dict[str, Any],
                      fields: Optional[Iterable[str]] = None,
                      unordered_fields: Iterable[str] = ("amenities", "options", "tags")) -> Dict[str, Dict[str, Any]]:
    """
    Field-level changes between a stored record and edited values.

    Args:
        original: Stored record
        modified: Edited values
        fields: Field names to compare (defaults to the keys of ``modified``)
        unordered_fields: List fields whose order does not matter

    Returns:
        {field: {'old': ..., 'new': ...}} for every changed field
    """
    names = list(fields) if fields is not None else list(modified.keys())
    unordered = set(unordered_fields)

    changes: Dict[str, Dict[str, Any]] = {}
    for name in names:
        old_raw = original.get(name)
        new_raw = modified.get(name)

        if is_pending_upload(new_raw):
            changes[name] = {'old': old_raw, 'new': new_raw}
            continue

        old_value = _normalize_stored(name, old_raw)
        new_value = _normalize_stored(name, new_raw)

        if name in unordered and isinstance(old_value, list) and isinstance(new_value, list):
            diff = DeepDiff(old_value, new_value, ignore_order=True)
        else:
            diff = DeepDiff(old_value, new_value, ignore_numeric_type_changes=True)

        if diff:
            changes[name] = {'old': old_raw, 'new': new_raw}

    logger.debug(f"Calculated {len(changes)} changed field(s): {sorted(changes)}")
    return changes


def has_changes(changes: Dict[str, Any]) -> bool:
    return bool(changes)


def changed_values(changes: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Partial update payload built from calculate_changes output."""
    return {name: change['new'] for name, change in changes.items()}


def _format_value(value: Any, max_length: int = 80) -> str:
    """Short display form of a value."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return "-"
    if is_pending_upload(value):
        return f"📎 {getattr(value, 'name', 'new file')}"
    if isinstance(value, (list, tuple)):
        text = ", ".join(str(item) for item in value) or "-"
    elif isinstance(value, bool):
        text = "Yes" if value else "No"
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, (datetime, date)):
        text = value.isoformat()
    else:
        text = str(value)

    if len(text) > max_length:
        return text[:max_length - 3] + "..."
    return text


def format_changes_for_display(changes: Dict[str, Dict[str, Any]],
                               labels: Optional[Dict[str, str]] = None) -> List[Dict[str, str]]:
    """
    Rows for a changes preview table.

    Args:
        changes: Output of calculate_changes
        labels: Optional field name -> display label mapping

    Returns:
        List of {'Field', 'Before', 'After'} rows
    """
    labels = labels or {}
    rows = []
    for name, change in changes.items():
        rows.append({
            'Field': labels.get(name, name).rstrip(' *'),
            'Before': _format_value(change.get('old')),
            'After': _format_value(change.get('new')),
        })
    return rows
