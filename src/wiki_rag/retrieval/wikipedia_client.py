"""Shared HTTP access to the MediaWiki query API."""

from __future__ import annotations
from typing import Any, Dict, Optional, Type

import requests
from requests.exceptions import RequestException, Timeout

from ..utils.errors import RAGError
from ..utils.logger import get_logger


DEFAULT_API_URL = "https://en.wikipedia.org/w/api.php"
DEFAULT_USER_AGENT = "RAG-CLI-App/1.0"


class WikipediaClient:
    """
    Base client for the Wikipedia ``action=query`` endpoint.

    Issues one GET per call with a bounded timeout and an identifying
    User-Agent, and converts every failure into the caller's error type.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 15,
        logger_name: str = "wikipedia",
    ):
        """
        Initialize Wikipedia client.

        Args:
            api_url: MediaWiki API endpoint
            user_agent: Value sent in the User-Agent header
            timeout: Per-request timeout in seconds
            logger_name: Logger name
        """
        self.api_url = api_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.logger = get_logger(logger_name)

    @classmethod
    def from_config(cls, config, **kwargs):
        """Create a client from the ``wikipedia`` config section."""
        return cls(
            api_url=config.get("wikipedia.api_url", DEFAULT_API_URL),
            user_agent=config.get("wikipedia.user_agent", DEFAULT_USER_AGENT),
            timeout=config.get("wikipedia.timeout", 15),
            **kwargs,
        )

    def _get_json(
        self,
        params: Dict[str, Any],
        error_cls: Type[RAGError],
        error_kwargs: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Perform a GET request and decode the JSON body.

        Args:
            params: Query string parameters
            error_cls: Exception type raised on any failure
            error_kwargs: Extra keyword arguments for error_cls

        Returns:
            Decoded JSON object

        Raises:
            error_cls: On network failure, timeout, non-200 status or bad JSON
        """
        error_kwargs = error_kwargs or {}
        self.logger.debug(f"GET {self.api_url} params={params}")

        try:
            response = requests.get(
                self.api_url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except Timeout as e:
            raise error_cls(
                f"Wikipedia API request timed out after {self.timeout}s", **error_kwargs
            ) from e
        except RequestException as e:
            raise error_cls(f"Wikipedia API request failed: {e}", **error_kwargs) from e

        if response.status_code != 200:
            raise error_cls(
                f"Wikipedia API returned status {response.status_code}",
                status=response.status_code,
                body=response.text,
                **error_kwargs,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(
                f"failed to parse JSON response ({e})", body=response.text, **error_kwargs
            ) from e

        if not isinstance(data, dict):
            raise error_cls(
                "unexpected JSON response shape", body=response.text, **error_kwargs
            )

        return data
