"""
Hooks for spaces and the records that hang off a space: offers, nearby
attractions and gallery images.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import storage
from .data_hooks import EntityHook, RecordNotFound
from .error_handler import extract_error_message

logger = logging.getLogger(__name__)

MAX_REORDER_WORKERS = 8


class SpaceHook(EntityHook):
    table = "spaces"
    order_by = "name"
    order_desc = False
    bucket = "spaces"
    file_fields = ("image",)
    entity_name = "space"

    def _stored_paths(self, record_id: Any) -> List[Tuple[str, str]]:
        """Cover image plus every gallery image of the space."""
        paths = super()._stored_paths(record_id)
        try:
            response = self.client.table(SpaceImageHook.table).select("path").eq("space_id", record_id).execute()
            paths.extend((self.bucket_for("path"), row.get("path")) for row in (response.data or [])
                         if storage.is_stored_path(row.get("path")))
        except Exception as e:
            logger.warning(f"Could not look up gallery of space {record_id}: {extract_error_message(e)}")
        return paths


class SpaceChildHook(EntityHook):
    """
    Hook for rows owned by a space. The parent reference is set on create
    and never sent on update.
    """

    parent_field = "space_id"
    order_by = "created_at"
    order_desc = True

    @property
    def immutable_fields(self) -> Tuple[str, ...]:
        return ("id", "created_at", self.parent_field)

    def create(self, space_id: Any, data: Any) -> Optional[Dict[str, Any]]:
        """Insert a row for the given space."""
        if hasattr(data, "model_dump"):
            data = data.model_dump()
        payload = dict(data)
        payload[self.parent_field] = space_id
        return super().create(payload)

    def list_for_space(self, space_id: Any) -> Optional[List[Dict[str, Any]]]:
        """Rows of one space in listing order."""
        def _list():
            response = (self._query().select("*")
                        .eq(self.parent_field, space_id)
                        .order(self.order_by, desc=self.order_desc)
                        .execute())
            return response.data or []

        return self._run(f"Failed to load {self.plural}", _list)


class OfferHook(SpaceChildHook):
    table = "space_offers"
    entity_name = "offer"


class AttractionHook(SpaceChildHook):
    table = "space_attractions"
    entity_name = "attraction"


class SpaceImageHook(SpaceChildHook):
    """
    Gallery images of a space. Positions are 1-based and dense per space;
    ``reorder`` rewrites them from an ordered id list.
    """

    table = "space_images"
    order_by = "position"
    order_desc = False
    bucket = "spaces"
    file_fields = ("path",)
    entity_name = "image"

    def upload_image(self, space_id: Any, file: Any, alt: Optional[str] = None,
                     position: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Store an image and insert its gallery row.

        Args:
            space_id: Owning space
            file: Pending upload
            alt: Alternative text
            position: Gallery position (appended after the last image if None)

        Returns:
            The inserted row, or None on failure
        """
        if position is None:
            existing = self.list_for_space(space_id)
            if existing is None:
                return None
            position = len(existing) + 1

        return self.create(space_id, {"path": file, "alt": alt or None, "position": position})

    def upload_images(self, space_id: Any, files: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Append several images after the current last position, in order.
        Stops at the first failure; rows inserted before it are kept.
        """
        existing = self.list_for_space(space_id)
        if existing is None:
            return []

        inserted: List[Dict[str, Any]] = []
        for index, file in enumerate(files):
            row = self.upload_image(space_id, file, position=len(existing) + index + 1)
            if row is None:
                break
            inserted.append(row)
        return inserted

    def reorder(self, space_id: Any, image_ids: Sequence[Any]) -> bool:
        """
        Set each image's position to its 1-based index in ``image_ids``.

        The updates are sent concurrently. There is no rollback: when some of
        them fail the others stay applied and one aggregate error is reported.

        Returns:
            True if every update succeeded
        """
        ids = list(image_ids)

        def _reorder():
            if len(set(ids)) != len(ids):
                raise ValueError("Duplicate image ids in reorder request")
            if not ids:
                return True

            def _set_position(item: Tuple[int, Any]) -> Optional[str]:
                position, image_id = item
                try:
                    response = (self._query().update({"position": position})
                                .eq("id", image_id)
                                .eq(self.parent_field, space_id)
                                .execute())
                    if not response.data:
                        raise RecordNotFound(f"Image {image_id} not found")
                    return None
                except Exception as e:
                    message = extract_error_message(e)
                    logger.error(f"Failed to move image {image_id} to position {position}: {message}")
                    return message

            with ThreadPoolExecutor(max_workers=min(MAX_REORDER_WORKERS, len(ids))) as executor:
                failures = [m for m in executor.map(_set_position, enumerate(ids, start=1)) if m]

            if failures:
                raise RuntimeError(f"Failed to reorder some images ({len(failures)} of {len(ids)} updates failed)")

            logger.info(f"Reordered {len(ids)} images of space {space_id}")
            return True

        return bool(self._run("Failed to reorder some images", _reorder, default=False))

    def normalize_positions(self, space_id: Any) -> bool:
        """Rewrite positions as 1..N in the current order (e.g. after a delete)."""
        images = self.list_for_space(space_id)
        if images is None:
            return False
        if all(image.get("position") == index for index, image in enumerate(images, start=1)):
            return True
        return self.reorder(space_id, [image["id"] for image in images])


def move_image(image_ids: List[Any], image_id: Any, offset: int) -> List[Any]:
    """
    Move one id by ``offset`` places within the list, clamped to the ends.
    Unknown ids leave the order unchanged.
    """
    if image_id not in image_ids:
        return list(image_ids)
    order = list(image_ids)
    index = order.index(image_id)
    target = max(0, min(len(order) - 1, index + offset))
    order.insert(target, order.pop(index))
    return order
