"""Retrieval components: Wikipedia search, article extracts and context assembly."""

from .search_client import SearchClient
from .content_client import ContentClient
from .context_assembler import ContextAssembler

__all__ = ["SearchClient", "ContentClient", "ContextAssembler"]
