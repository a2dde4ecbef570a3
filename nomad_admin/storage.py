"""
Object storage helpers.

Files picked in a form stay pending uploads (Streamlit UploadedFile objects)
until a hook stores them. Stored files are referenced by their path inside a
bucket; the public URL is derived on demand.
"""

import mimetypes
import random
import string
import time
import logging
from typing import Any, Iterable, List, Optional

from .config_loader import get_config_value

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
RANDOM_SUFFIX_LENGTH = 3


def is_pending_upload(value: Any) -> bool:
    """True for a picked-but-not-stored file (anything shaped like UploadedFile)."""
    return value is not None and not isinstance(value, (str, bytes)) \
        and hasattr(value, 'getvalue') and hasattr(value, 'name')


def is_stored_path(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def upload_size(file: Any) -> int:
    size = getattr(file, 'size', None)
    if isinstance(size, int):
        return size
    return len(file.getvalue())


def upload_content_type(file: Any) -> str:
    content_type = getattr(file, 'type', None)
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(getattr(file, 'name', '') or '')
    return guessed or 'application/octet-stream'


def to_base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


def generate_file_name(original_name: str, now_ms: Optional[int] = None,
                       rng: Optional[random.Random] = None) -> str:
    """
    Build a collision-resistant object name: base-36 millisecond timestamp,
    a short random base-36 suffix and the original extension.

    Args:
        original_name: Name of the picked file (only its extension is kept)
        now_ms: Timestamp override in milliseconds
        rng: Random source override

    Returns:
        e.g. "lx2k9q1abc.png"
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random

    stem = to_base36(now_ms) + ''.join(rng.choice(BASE36_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH))

    _, dot, extension = (original_name or '').rpartition('.')
    if dot and extension:
        return f"{stem}.{extension.lower()}"
    return stem


def upload_file(client: Any, bucket: str, file: Any) -> str:
    """
    Store a pending upload and return its path inside the bucket.

    ``bucket`` is the storage bucket name as configured (hooks resolve it).
    Errors from the storage service propagate to the caller.
    """
    path = generate_file_name(getattr(file, 'name', ''))
    content_type = upload_content_type(file)

    file_options = {
        'content-type': content_type,
        'cache-control': str(get_config_value('storage', 'cache_control', '3600')),
        'upsert': 'true' if get_config_value('storage', 'upsert', True) else 'false',
    }

    client.storage.from_(bucket).upload(
        path=path,
        file=file.getvalue(),
        file_options=file_options,
    )

    logger.info(f"Uploaded {getattr(file, 'name', 'file')} ({content_type}) to {bucket}/{path}")
    return path


def get_public_url(client: Any, bucket: str, path: Optional[str]) -> Optional[str]:
    """Public URL of a stored object; absolute URLs are returned unchanged."""
    if not is_stored_path(path):
        return None
    if path.startswith(('http://', 'https://')):
        return path
    url = client.storage.from_(bucket).get_public_url(path)
    return url.rstrip('?') if isinstance(url, str) else url


def remove_files(client: Any, bucket: str, paths: Iterable[str]) -> List[str]:
    """
    Remove stored objects. Absolute URLs and blanks are skipped.

    Returns:
        The paths that were sent for removal
    """
    targets = [p for p in paths if is_stored_path(p) and not p.startswith(('http://', 'https://'))]
    if not targets:
        return []

    client.storage.from_(bucket).remove(targets)
    logger.info(f"Removed {len(targets)} file(s) from {bucket}")
    return targets
