"""
wiki-rag - answer questions with a local LLM grounded in Wikipedia articles.
"""

__version__ = "0.1.0"

from .pipeline import WikiRAGPipeline
from .utils.config import Config, load_config

__all__ = ["WikiRAGPipeline", "Config", "load_config"]
