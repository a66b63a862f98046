"""Wikipedia article extract client."""

from __future__ import annotations
from typing import Any, Dict, Optional, Tuple

from .wikipedia_client import WikipediaClient
from ..utils.errors import ContentError


def _page_sort_key(item: Tuple[str, Dict[str, Any]]) -> Tuple[int, str]:
    """Order pages by numeric page ID, non-numeric keys last."""
    page_id, _ = item
    try:
        return (int(page_id), page_id)
    except ValueError:
        return (2 ** 63, page_id)


class ContentClient(WikipediaClient):
    """
    Fetches the plain-text introduction of a single article.

    The API answers with a map of pages keyed by page ID. When more than one
    real page comes back, the one with the lowest numeric page ID wins, so
    the result never depends on JSON key order. Pages flagged ``missing`` or
    ``invalid`` (the API keys those with negative IDs) count as not found.
    """

    def __init__(self, *args, logger_name: str = "content_client", **kwargs):
        super().__init__(*args, logger_name=logger_name, **kwargs)

    def fetch_content(self, title: str) -> str:
        """
        Fetch the introductory extract for exactly one title.

        Args:
            title: Article title as returned by search

        Returns:
            Extract text, unmodified (may be empty)

        Raises:
            ContentError: On request failure, malformed body or unknown title
        """
        params = {
            "action": "query",
            "titles": title,
            "prop": "extracts",
            "explaintext": "true",
            "exintro": "true",
            "format": "json",
            "utf8": "1",
        }

        data = self._get_json(params, ContentError, {"title": title})

        query_block = data.get("query")
        pages = query_block.get("pages") if isinstance(query_block, dict) else None
        if pages is None:
            raise ContentError(f"no content found for '{title}'", title=title, not_found=True)
        if not isinstance(pages, dict):
            raise ContentError("response 'query.pages' is not an object", title=title)

        page = self._select_page(pages)
        if page is None:
            raise ContentError(f"no content found for '{title}'", title=title, not_found=True)

        extract = page.get("extract") or ""
        self.logger.debug(f"Fetched '{title}': {len(extract)} chars")
        return extract

    @staticmethod
    def _select_page(pages: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Pick the existing page with the lowest page ID, or None."""
        candidates = [
            (page_id, page)
            for page_id, page in pages.items()
            if isinstance(page, dict) and "missing" not in page and "invalid" not in page
        ]
        if not candidates:
            return None
        return min(candidates, key=_page_sort_key)[1]
