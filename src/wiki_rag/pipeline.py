"""Question answering pipeline: search, retrieve, assemble, prompt, generate."""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional
import time

from .generation.llm_client import LLMClient, create_llm_client
from .generation.prompt_builder import PromptBuilder
from .retrieval.content_client import ContentClient
from .retrieval.context_assembler import ContextAssembler
from .retrieval.search_client import SearchClient
from .utils.errors import (
    ASSEMBLING,
    GENERATING,
    RETRIEVING,
    SEARCHING,
    ContentError,
    EmptyResultsError,
    RAGError,
)
from .utils.logger import get_logger


IDLE = "idle"
DONE = "done"
FAILED = "failed"

EMPTY_RESULTS_POLICIES = ("fail", "fallback")

# Progress events passed to the optional run() callback
FOUND = "found"
RETRIEVAL_FAILED = "retrieval_failed"

ProgressCallback = Callable[[str, str], None]


class WikiRAGPipeline:
    """
    Answers one question at a time from Wikipedia articles.

    Search and generation failures are fatal for the question and raise a
    RAGError subclass. Per-article retrieval failures are logged and the
    article is left out of the context. Each ``run`` owns its own data, so
    one pipeline can answer any number of questions in sequence.
    """

    def __init__(
        self,
        config,
        search_client: Optional[SearchClient] = None,
        content_client: Optional[ContentClient] = None,
        llm_client: Optional[LLMClient] = None,
        context_assembler: Optional[ContextAssembler] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        logger_name: str = "pipeline",
    ):
        """
        Initialize pipeline.

        Args:
            config: Configuration object
            search_client: Search client (built from config if None)
            content_client: Content client (built from config if None)
            llm_client: Generation backend (built from config if None)
            context_assembler: Context assembler (built from config if None)
            prompt_builder: Prompt builder (built from config if None)
            logger_name: Logger name
        """
        self.config = config
        self.search_client = search_client or SearchClient.from_config(config)
        self.content_client = content_client or ContentClient.from_config(config)
        self.llm_client = llm_client or create_llm_client(config)
        self.context_assembler = context_assembler or ContextAssembler.from_config(config)
        self.prompt_builder = prompt_builder or PromptBuilder.from_config(config)
        self.logger = get_logger(logger_name)

        self.search_limit = config.get("wikipedia.search_limit", 3)
        self.max_workers = max(1, int(config.get("retrieval.max_workers", 3)))
        self.on_empty_results = config.get("pipeline.on_empty_results", "fail")
        if self.on_empty_results not in EMPTY_RESULTS_POLICIES:
            raise ValueError(
                f"pipeline.on_empty_results must be one of {EMPTY_RESULTS_POLICIES}, "
                f"got '{self.on_empty_results}'"
            )

        self.state = IDLE

    def run(
        self,
        question: str,
        model: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """
        Answer a question.

        Args:
            question: Non-blank question text
            model: Override the generation model for this question
            progress: Called as progress(event, message) when a stage starts
                      or an article fails; events are "found", "retrieving",
                      "retrieval_failed" and "generating"

        Returns:
            Dictionary with the answer, titles, retrieved and failed
            articles, context, prompt and timing metadata

        Raises:
            ValueError: If the question is blank
            SearchError: If search fails (EmptyResultsError when nothing
                         matched and the policy is "fail")
            GenerationError: If the backend fails
        """
        if not question or not question.strip():
            raise ValueError("Question must not be empty")

        notify = progress or (lambda event, message: None)
        start_time = time.time()
        self.logger.info(f"Answering question: '{question}'")

        try:
            self.state = SEARCHING
            titles = self.search_client.search(question, limit=self.search_limit)
            search_time = time.time() - start_time

            used_fallback = False
            if not titles:
                if self.on_empty_results == "fail":
                    raise EmptyResultsError(question)
                self.logger.warning("No Wikipedia results; generating without context")
                used_fallback = True

            notify(FOUND, f"Found {len(titles)} relevant articles")

            self.state = RETRIEVING
            retrieval_start = time.time()
            for title in titles:
                notify(RETRIEVING, f"Retrieving: {title}")
            results = self.retrieve(titles)
            for failure in (r for r in results if "error" in r):
                notify(RETRIEVAL_FAILED, f"Error retrieving {failure['title']}: {failure['error']}")
            retrieval_time = time.time() - retrieval_start

            self.state = ASSEMBLING
            context = self.context_assembler.assemble(results)
            prompt = self.prompt_builder.build_prompt(question, context)

            self.state = GENERATING
            notify(GENERATING, f"Generating answer with {model or self.llm_client.model}...")
            generation_start = time.time()
            answer = self.llm_client.generate(prompt, model=model)
            generation_time = time.time() - generation_start

        except RAGError as e:
            self.state = FAILED
            self.logger.error(f"Question failed during {e.stage}: {e}")
            raise
        except Exception:
            self.state = FAILED
            raise

        self.state = DONE
        total_time = time.time() - start_time

        articles = [r for r in results if "error" not in r]
        failed = [r for r in results if "error" in r]
        self.logger.info(
            f"Answered in {total_time:.2f}s using {len(articles)}/{len(titles)} articles"
        )

        return {
            "question": question,
            "answer": (answer or "").strip(),
            "titles": titles,
            "articles": articles,
            "failed": failed,
            "context": context,
            "prompt": prompt,
            "used_fallback": used_fallback,
            "metadata": {
                "model": model or self.llm_client.model,
                "backend": self.llm_client.backend,
                "timing": {
                    "search_time": round(search_time, 3),
                    "retrieval_time": round(retrieval_time, 3),
                    "generation_time": round(generation_time, 3),
                    "total_time": round(total_time, 3),
                },
            },
        }

    def retrieve(self, titles: List[str]) -> List[Dict[str, Any]]:
        """
        Fetch the extract of every title, tolerating individual failures.

        Requests run on a bounded thread pool; results come back in the
        order of ``titles`` regardless of completion order.

        Args:
            titles: Titles in search order

        Returns:
            One entry per title: ``{"title", "content"}`` or ``{"title", "error"}``
        """
        if not titles:
            return []

        workers = min(self.max_workers, len(titles))
        if workers == 1:
            return [self._fetch_one(title) for title in titles]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="wiki_fetch") as executor:
            return list(executor.map(self._fetch_one, titles))

    def _fetch_one(self, title: str) -> Dict[str, Any]:
        self.logger.info(f"Retrieving: {title}")
        try:
            content = self.content_client.fetch_content(title)
        except ContentError as e:
            self.logger.warning(f"Error retrieving '{title}': {e}")
            return {"title": title, "error": str(e)}
        return {"title": title, "content": content}
