"""
Hook for blog posts. A post may carry a cover image and a video, both stored
in the blogs bucket.
"""

from typing import Any, Dict, List, Optional

from .data_hooks import EntityHook


class BlogHook(EntityHook):
    table = "blog"
    order_by = "created_at"
    order_desc = True
    bucket = "blogs"
    file_fields = ("image", "video")
    entity_name = "blog post"

    def find_by_slug(self, slug: str) -> Optional[List[Dict[str, Any]]]:
        """Posts using a slug (used to warn about duplicates before saving)."""
        def _find():
            response = self._query().select("id,name,slug").eq("slug", slug).execute()
            return response.data or []

        return self._run("Failed to check slug", _find)
