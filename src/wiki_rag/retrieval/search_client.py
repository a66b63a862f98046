"""Wikipedia full-text search client."""

from __future__ import annotations
from typing import List, Optional

from .wikipedia_client import WikipediaClient, DEFAULT_API_URL, DEFAULT_USER_AGENT
from ..utils.errors import SearchError


class SearchClient(WikipediaClient):
    """Finds article titles matching a natural-language question."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 15,
        limit: int = 3,
        logger_name: str = "search_client",
    ):
        super().__init__(api_url, user_agent, timeout, logger_name)
        self.limit = limit

    @classmethod
    def from_config(cls, config, **kwargs):
        return super().from_config(
            config, limit=config.get("wikipedia.search_limit", 3), **kwargs
        )

    def search(self, query: str, limit: Optional[int] = None) -> List[str]:
        """
        Search Wikipedia for articles matching the query.

        Args:
            query: Non-empty search text
            limit: Maximum number of titles (defaults to the configured limit)

        Returns:
            Titles in relevance order; empty if nothing matched

        Raises:
            SearchError: On network failure, non-200 status or malformed body
        """
        limit = limit if limit is not None else self.limit
        params = {
            "action": "query",
            "list": "search",
            "srsearch": query,
            "format": "json",
            "srlimit": str(limit),
            "utf8": "1",
        }

        data = self._get_json(params, SearchError)

        query_block = data.get("query")
        if not isinstance(query_block, dict):
            # MediaWiki reports bad requests as a 200 with an "error" object
            error = data.get("error")
            if isinstance(error, dict):
                raise SearchError(
                    f"Wikipedia API error {error.get('code', 'unknown')}: "
                    f"{error.get('info', '')}"
                )
            if error is not None:
                raise SearchError("malformed error object", body=str(data))
            raise SearchError("response has no 'query' section", body=str(data))

        results = query_block.get("search")
        if not isinstance(results, list):
            raise SearchError("response has no 'query.search' list", body=str(data))

        titles = [
            result["title"]
            for result in results
            if isinstance(result, dict) and result.get("title")
        ]
        self.logger.info(f"Search for '{query}' returned {len(titles)} titles")
        return titles
