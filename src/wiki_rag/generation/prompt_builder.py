"""Prompt builder for Wikipedia-grounded question answering."""

from __future__ import annotations
from typing import Dict


class PromptBuilder:
    """
    Builds the exact text sent to the generation backend.

    Pure and deterministic: the same question and context always give the
    same prompt, and both appear in it verbatim.
    """

    # Default RAG prompt template
    DEFAULT_TEMPLATE = """Based on the following Wikipedia articles, answer this question: {question}

Context:
{context}

Answer the question using only the context provided. If the context doesn't contain enough information, say so.

Answer:"""

    # Shorter variant for small local models
    CONCISE_TEMPLATE = """Question: {question}

Wikipedia context:
{context}

Using only the context above, answer in a few sentences. If the context is insufficient, say so explicitly.

Answer:"""

    def __init__(self, template: str = None):
        """
        Initialize prompt builder.

        Args:
            template: Custom prompt template with {question} and {context}
                      placeholders (uses DEFAULT_TEMPLATE if None)
        """
        self.template = template or self.DEFAULT_TEMPLATE
        if "{question}" not in self.template or "{context}" not in self.template:
            raise ValueError("Prompt template needs {question} and {context} placeholders")

    @classmethod
    def from_config(cls, config) -> "PromptBuilder":
        templates = cls.get_available_templates()
        name = config.get("generation.prompt_template", "default")
        if name not in templates:
            raise ValueError(
                f"Unknown prompt template '{name}'. Available: {sorted(templates)}"
            )
        return cls(template=templates[name])

    def build_prompt(self, question: str, context: str) -> str:
        """
        Build a prompt from the question and assembled context.

        Args:
            question: User's question
            context: Bounded context block (may be empty)

        Returns:
            Prompt text
        """
        return self.template.format(question=question, context=context)

    @staticmethod
    def get_available_templates() -> Dict[str, str]:
        """
        Get available prompt templates.

        Returns:
            Dictionary of template names to template strings
        """
        return {
            "default": PromptBuilder.DEFAULT_TEMPLATE,
            "concise": PromptBuilder.CONCISE_TEMPLATE,
        }
