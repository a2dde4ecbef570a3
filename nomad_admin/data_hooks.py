"""
Data access hooks for the admin pages.

A hook wraps one backend table (and, for records with files, one storage
bucket). Every operation catches backend and transport errors: the message
lands on ``hook.error``, gets logged, and the operation returns its sentinel
(None, or False for deletes) instead of raising. ``is_loading`` is set while a
request runs and ``success`` after the last operation completed.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import streamlit as st
from pydantic import BaseModel
from supabase import Client, create_client

from . import storage
from .config_loader import get_bucket_name, require_config_value
from .error_handler import extract_error_message
from .model_builder import to_record

logger = logging.getLogger(__name__)


@st.cache_resource(show_spinner=False)
def _create_client(url: str, key: str) -> Client:
    logger.info(f"Creating backend client for {url}")
    return create_client(url, key)


def get_client() -> Client:
    """
    Shared backend client built from the supabase config section.

    Raises:
        ConfigurationError: If the URL or key is not configured
    """
    url = require_config_value('supabase', 'url')
    key = require_config_value('supabase', 'key')
    return _create_client(url, key)


class RecordNotFound(Exception):
    """Raised inside hook operations when a write matched no row."""


class BaseHook:
    """
    Read and delete operations shared by every hook.

    Subclasses set ``table``, ``order_by``/``order_desc`` for listings and
    ``file_fields`` naming the columns that hold storage paths.
    """

    table: str = ""
    order_by: str = "created_at"
    order_desc: bool = True
    bucket: Optional[str] = None
    file_fields: Tuple[str, ...] = ()
    entity_name: str = "record"
    entity_plural: Optional[str] = None

    def __init__(self, client: Optional[Any] = None):
        self._client = client
        self.is_loading = False
        self.error: Optional[str] = None
        self.success = False

    @property
    def plural(self) -> str:
        return self.entity_plural or f"{self.entity_name}s"

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_client()
        return self._client

    def _query(self):
        return self.client.table(self.table)

    def _run(self, failure_message: str, operation: Callable[[], Any], default: Any = None) -> Any:
        """
        Run one backend operation with the shared state and failure handling.

        Args:
            failure_message: Message used when the error carries none
            operation: Callable doing the work
            default: Sentinel returned on failure

        Returns:
            The operation's result, or ``default`` if it raised
        """
        self.is_loading = True
        self.error = None
        self.success = False
        try:
            result = operation()
            self.success = True
            return result
        except Exception as e:
            self.error = extract_error_message(e, failure_message)
            logger.error(f"{failure_message} ({self.table}): {self.error}")
            return default
        finally:
            self.is_loading = False

    def list(self) -> Optional[List[Dict[str, Any]]]:
        """All rows, in the hook's listing order."""
        def _list():
            response = self._query().select("*").order(self.order_by, desc=self.order_desc).execute()
            return response.data or []

        return self._run(f"Failed to load {self.plural}", _list)

    def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """One row by id."""
        def _get():
            response = self._query().select("*").eq("id", record_id).single().execute()
            if not response.data:
                raise RecordNotFound(f"{self.entity_name.capitalize()} {record_id} not found")
            return response.data

        return self._run(f"Failed to load {self.entity_name}", _get)

    def count(self) -> Optional[int]:
        def _count():
            response = self._query().select("id").execute()
            return len(response.data or [])

        return self._run(f"Failed to count {self.plural}", _count)

    def delete(self, record_id: Any) -> bool:
        """
        Delete a row; files it references are removed afterwards on a best
        effort basis (failures are only logged).
        """
        def _delete():
            paths = self._stored_paths(record_id)
            self._query().delete().eq("id", record_id).execute()
            logger.info(f"Deleted {self.entity_name} {record_id} from {self.table}")
            self._remove_files_quietly(paths)
            return True

        return bool(self._run(f"Failed to delete {self.entity_name}", _delete, default=False))

    def _stored_paths(self, record_id: Any) -> List[Tuple[str, str]]:
        """(bucket, path) pairs referenced by a row; lookup failures give []."""
        if not self.file_fields or not self.bucket:
            return []
        try:
            response = self._query().select(",".join(self.file_fields)).eq("id", record_id).execute()
        except Exception as e:
            logger.warning(f"Could not look up files of {self.entity_name} {record_id}: "
                           f"{extract_error_message(e)}")
            return []
        rows = response.data or []
        if not rows:
            return []
        return [(self.bucket_for(field), rows[0].get(field)) for field in self.file_fields
                if storage.is_stored_path(rows[0].get(field))]

    def bucket_for(self, field_name: str) -> str:
        """Configured storage bucket holding a file field."""
        return get_bucket_name(self.bucket) if self.bucket else ""

    def _remove_files_quietly(self, paths: Iterable[Tuple[str, str]]) -> None:
        by_bucket: Dict[str, List[str]] = {}
        for bucket, path in paths:
            by_bucket.setdefault(bucket, []).append(path)

        for bucket, bucket_paths in by_bucket.items():
            try:
                storage.remove_files(self.client, bucket, bucket_paths)
            except Exception as e:
                logger.warning(f"Failed to remove files {bucket_paths} from {bucket}: "
                               f"{extract_error_message(e)}")

    def public_url(self, path: Optional[str], bucket: Optional[str] = None) -> Optional[str]:
        """Public URL of a stored file; None when there is no file or no URL."""
        if not storage.is_stored_path(path):
            return None
        try:
            target = get_bucket_name(bucket) if bucket else self.bucket_for("")
            return storage.get_public_url(self.client, target, path)
        except Exception as e:
            logger.warning(f"Failed to resolve public URL for {path}: {extract_error_message(e)}")
            return None


class EntityHook(BaseHook):
    """Full create/read/update/delete hook for a table with optional files."""

    # Columns never sent on update
    immutable_fields: Tuple[str, ...] = ("id", "created_at")

    def _upload_pending(self, data: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Tuple[str, str]]]:
        """
        Replace pending uploads in file fields by their stored paths.

        Returns:
            (prepared data, [(bucket, path)] of the files stored by this call)
        """
        prepared = dict(data)
        uploaded: List[Tuple[str, str]] = []
        for field in self.file_fields:
            value = prepared.get(field)
            if storage.is_pending_upload(value):
                bucket = self.bucket_for(field)
                prepared[field] = storage.upload_file(self.client, bucket, value)
                uploaded.append((bucket, prepared[field]))
            elif field in prepared and not storage.is_stored_path(value):
                prepared[field] = None
        return prepared, uploaded

    def _prepare(self, data: Any) -> Tuple[Dict[str, Any], List[Tuple[str, str]]]:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        prepared, uploaded = self._upload_pending(dict(data))
        return to_record(prepared), uploaded

    def _write_row(self, uploaded: List[Tuple[str, str]], write: Callable[[], Any],
                   missing_message: str) -> Dict[str, Any]:
        """
        Run a write and return the first row it reports. Files stored for
        the write are removed again if it fails or matches nothing.
        """
        try:
            response = write()
            rows = response.data or []
            if not rows:
                raise RecordNotFound(missing_message)
            return rows[0]
        except Exception:
            if uploaded:
                logger.warning(f"Write to {self.table} failed, removing {len(uploaded)} uploaded file(s)")
                self._remove_files_quietly(uploaded)
            raise

    def create(self, data: Any) -> Optional[Dict[str, Any]]:
        """
        Insert a row. Pending uploads are stored first and replaced by their
        paths.

        Args:
            data: Validated model instance or mapping of column values

        Returns:
            The inserted row, or None on failure
        """
        def _create():
            payload, uploaded = self._prepare(data)
            row = self._write_row(uploaded, lambda: self._query().insert(payload).execute(),
                                  f"No {self.entity_name} returned after insert")
            logger.info(f"Created {self.entity_name} {row.get('id')} in {self.table}")
            return row

        return self._run(f"Failed to create {self.entity_name}", _create)

    def update(self, record_id: Any, fields: Any) -> Optional[Dict[str, Any]]:
        """
        Partially update a row with the given fields only.

        Returns:
            The updated row, or None on failure
        """
        def _update():
            payload, uploaded = self._prepare(fields)
            for name in self.immutable_fields:
                payload.pop(name, None)
            row = self._write_row(uploaded, lambda: self._query().update(payload).eq("id", record_id).execute(),
                                  f"{self.entity_name.capitalize()} {record_id} not found")
            logger.info(f"Updated {self.entity_name} {record_id}: {sorted(payload.keys())}")
            return row

        return self._run(f"Failed to update {self.entity_name}", _update)

    def upload_file(self, file: Any, bucket: Optional[str] = None) -> Optional[str]:
        """
        Store a file. None gives None, an already stored path is returned
        unchanged, a pending upload is stored under a generated name.
        """
        if file is None:
            return None
        if isinstance(file, str):
            return file
        target = get_bucket_name(bucket) if bucket else self.bucket_for("")
        return self._run("Failed to upload file", lambda: storage.upload_file(self.client, target, file))
