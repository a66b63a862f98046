"""Builds the bounded context block injected into the prompt."""

from __future__ import annotations
from typing import Any, Dict, List

from ..utils.logger import get_logger


class ContextAssembler:
    """
    Concatenates retrieved articles into one bounded text block.

    Each successful article becomes a labeled block numbered by its search
    rank. Articles whose retrieval failed are skipped. The assembled text
    is at most ``max_chars_per_article + len(truncation_marker)`` characters
    of content per article plus the label of each block.
    """

    BLOCK_TEMPLATE = "\n--- Article {index}: {title} ---\n{content}\n"

    def __init__(
        self,
        max_chars_per_article: int = 1000,
        truncation_marker: str = "...",
        logger_name: str = "context_assembler",
    ):
        """
        Initialize context assembler.

        Args:
            max_chars_per_article: Characters kept from each extract
            truncation_marker: Appended to extracts that were cut
            logger_name: Logger name
        """
        if max_chars_per_article <= 0:
            raise ValueError("max_chars_per_article must be positive")
        self.max_chars_per_article = max_chars_per_article
        self.truncation_marker = truncation_marker
        self.logger = get_logger(logger_name)

    @classmethod
    def from_config(cls, config, **kwargs) -> "ContextAssembler":
        return cls(
            max_chars_per_article=config.get("retrieval.max_chars_per_article", 1000),
            truncation_marker=config.get("retrieval.truncation_marker", "..."),
            **kwargs,
        )

    def truncate(self, text: str) -> str:
        """Cut text to the per-article limit, marking the cut."""
        if len(text) <= self.max_chars_per_article:
            return text
        return text[: self.max_chars_per_article] + self.truncation_marker

    def assemble(self, results: List[Dict[str, Any]]) -> str:
        """
        Assemble retrieval results into a context block.

        Args:
            results: Entries in search order, each ``{"title", "content"}``
                     on success or ``{"title", "error"}`` on failure

        Returns:
            Context text; empty string when nothing was retrieved
        """
        parts = []
        for index, result in enumerate(results, start=1):
            title = result.get("title", "")
            content = result.get("content")
            if "error" in result or not isinstance(content, str):
                self.logger.debug(f"Skipping article {index} '{title}' (not retrieved)")
                continue

            truncated = self.truncate(content)
            if len(content) > self.max_chars_per_article:
                self.logger.debug(
                    f"Truncated '{title}' from {len(content)} to "
                    f"{self.max_chars_per_article} chars"
                )
            parts.append(
                self.BLOCK_TEMPLATE.format(index=index, title=title, content=truncated)
            )

        context = "".join(parts)
        self.logger.info(f"Assembled context: {len(parts)} articles, {len(context)} chars")
        return context
