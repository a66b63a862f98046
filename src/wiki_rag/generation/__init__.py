"""Generation components: prompt construction and LLM backends."""

from .llm_client import LLMClient, OllamaClient, CommandLineClient, create_llm_client
from .prompt_builder import PromptBuilder

__all__ = ["LLMClient", "OllamaClient", "CommandLineClient", "create_llm_client", "PromptBuilder"]
