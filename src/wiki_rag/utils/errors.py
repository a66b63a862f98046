"""Exception hierarchy for the question answering pipeline."""

from __future__ import annotations
from typing import Optional


# Pipeline stages, also used as Orchestrator states
SEARCHING = "searching"
RETRIEVING = "retrieving"
ASSEMBLING = "assembling"
GENERATING = "generating"

MAX_BODY_PREVIEW = 200


class RAGError(Exception):
    """Base exception for all pipeline errors."""

    stage: str = "pipeline"

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status = status
        self.body = body
        if body:
            message = f"{message}: {body[:MAX_BODY_PREVIEW]}"
        super().__init__(message)


class SearchError(RAGError):
    """Search request failed (network, non-success status or unparsable body)."""

    stage = SEARCHING


class EmptyResultsError(SearchError):
    """Search succeeded but returned no titles."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"no Wikipedia results found for '{query}'")


class ContentError(RAGError):
    """Extract for a single article could not be retrieved."""

    stage = RETRIEVING

    def __init__(
        self,
        message: str,
        title: str = "",
        status: Optional[int] = None,
        body: Optional[str] = None,
        not_found: bool = False,
    ):
        self.title = title
        self.not_found = not_found
        super().__init__(message, status=status, body=body)


class GenerationError(RAGError):
    """Text generation backend failed."""

    stage = GENERATING

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        exit_code: Optional[int] = None,
    ):
        self.exit_code = exit_code
        super().__init__(message, status=status, body=body)


def describe_error(error: Exception) -> str:
    """
    Provide a one-line, user-facing message for a pipeline error.

    Args:
        error: Exception raised while answering a question

    Returns:
        Message naming the failed stage and the underlying cause
    """
    if isinstance(error, RAGError):
        cause = f" (caused by {error.__cause__!r})" if error.__cause__ is not None else ""
        return f"{error.stage.capitalize()} failed: {error}{cause}"
    return f"An unexpected error occurred: {error}"
