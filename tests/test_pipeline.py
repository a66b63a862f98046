"""Tests for the end-to-end question answering pipeline (all services mocked)."""

import threading
import time

import pytest
from unittest.mock import Mock

from wiki_rag.generation.prompt_builder import PromptBuilder
from wiki_rag.pipeline import WikiRAGPipeline
from wiki_rag.retrieval.context_assembler import ContextAssembler
from wiki_rag.utils.errors import (
    ContentError,
    EmptyResultsError,
    GenerationError,
    SearchError,
)


ARTICLES = {
    "Quantum computing": "A quantum computer exploits superposition and entanglement.",
    "Quantum algorithm": "A quantum algorithm runs on a realistic model of quantum computation.",
}


def fetch_from(articles):
    """Content client side effect serving a dict, ContentError for unknown titles."""

    def _fetch(title):
        if title not in articles:
            raise ContentError(f"no content found for '{title}'", title=title, not_found=True)
        return articles[title]

    return _fetch


class TestWikiRAGPipeline:
    """Tests for WikiRAGPipeline class."""

    @pytest.fixture
    def search_client(self):
        mock = Mock()
        mock.search.return_value = ["Quantum computing", "Quantum algorithm"]
        return mock

    @pytest.fixture
    def content_client(self):
        mock = Mock()
        mock.fetch_content.side_effect = fetch_from(ARTICLES)
        return mock

    @pytest.fixture
    def llm_client(self):
        mock = Mock()
        mock.model = "llama2"
        mock.backend = "http"
        mock.generate.return_value = "\n  Quantum computing uses qubits.  \n"
        return mock

    @pytest.fixture
    def make_pipeline(self, config, search_client, content_client, llm_client):
        def _make(**overrides):
            for key, value in overrides.items():
                config.set(key, value)
            return WikiRAGPipeline(
                config,
                search_client=search_client,
                content_client=content_client,
                llm_client=llm_client,
            )

        return _make

    def test_quantum_computing_scenario(self, make_pipeline, search_client, llm_client):
        question = "What is quantum computing?"
        pipeline = make_pipeline()

        result = pipeline.run(question)

        search_client.search.assert_called_once_with(question, limit=3)
        context = result["context"]
        assert context.count("--- Article") == 2
        assert context.index("Quantum computing") < context.index("Quantum algorithm")
        assert "..." not in context

        prompt = llm_client.generate.call_args.args[0]
        assert prompt == result["prompt"]
        assert prompt.count(question) == 1
        assert context in prompt

        assert result["answer"] == "Quantum computing uses qubits."
        assert [a["title"] for a in result["articles"]] == ["Quantum computing", "Quantum algorithm"]
        assert result["failed"] == []
        assert result["used_fallback"] is False
        assert pipeline.state == "done"

    def test_result_metadata(self, make_pipeline):
        result = make_pipeline().run("What is quantum computing?")

        metadata = result["metadata"]
        assert metadata["model"] == "llama2"
        assert metadata["backend"] == "http"
        assert set(metadata["timing"]) == {
            "search_time", "retrieval_time", "generation_time", "total_time"
        }

    def test_one_retrieval_fails(self, make_pipeline, content_client, llm_client):
        content_client.fetch_content.side_effect = fetch_from(
            {"Quantum algorithm": ARTICLES["Quantum algorithm"]}
        )
        pipeline = make_pipeline()

        result = pipeline.run("What is quantum computing?")

        assert result["context"].count("--- Article") == 1
        assert "Quantum algorithm" in result["context"]
        assert [f["title"] for f in result["failed"]] == ["Quantum computing"]
        llm_client.generate.assert_called_once()
        assert pipeline.state == "done"

    def test_all_retrievals_fail_still_generates(self, make_pipeline, content_client, llm_client):
        content_client.fetch_content.side_effect = fetch_from({})

        result = make_pipeline().run("What is quantum computing?")

        assert result["context"] == ""
        assert len(result["failed"]) == 2
        llm_client.generate.assert_called_once()

    def test_empty_results_fail_policy(self, make_pipeline, search_client, content_client, llm_client):
        search_client.search.return_value = []
        pipeline = make_pipeline(**{"pipeline.on_empty_results": "fail"})

        with pytest.raises(EmptyResultsError) as exc_info:
            pipeline.run("asdkjhqwe zzzq")

        assert exc_info.value.stage == "searching"
        assert isinstance(exc_info.value, SearchError)
        content_client.fetch_content.assert_not_called()
        llm_client.generate.assert_not_called()
        assert pipeline.state == "failed"

    def test_empty_results_fallback_policy(self, make_pipeline, search_client, content_client, llm_client):
        search_client.search.return_value = []
        pipeline = make_pipeline(**{"pipeline.on_empty_results": "fallback"})

        result = pipeline.run("Who wrote Hamlet?")

        content_client.fetch_content.assert_not_called()
        prompt = llm_client.generate.call_args.args[0]
        assert prompt == PromptBuilder().build_prompt("Who wrote Hamlet?", "")
        assert result["context"] == ""
        assert result["used_fallback"] is True
        assert result["answer"] == "Quantum computing uses qubits."

    def test_invalid_empty_results_policy(self, make_pipeline):
        with pytest.raises(ValueError, match="on_empty_results"):
            make_pipeline(**{"pipeline.on_empty_results": "retry"})

    def test_search_failure_is_fatal(self, make_pipeline, search_client, llm_client):
        search_client.search.side_effect = SearchError("Wikipedia API returned status 500", status=500)
        pipeline = make_pipeline()

        with pytest.raises(SearchError):
            pipeline.run("What is quantum computing?")

        llm_client.generate.assert_not_called()
        assert pipeline.state == "failed"

    def test_generation_failure_is_fatal(self, make_pipeline, llm_client):
        llm_client.generate.side_effect = GenerationError("Ollama returned status 500", status=500)
        pipeline = make_pipeline()

        with pytest.raises(GenerationError) as exc_info:
            pipeline.run("What is quantum computing?")

        assert exc_info.value.stage == "generating"
        assert pipeline.state == "failed"

    def test_pipeline_reusable_after_failure(self, make_pipeline, llm_client):
        llm_client.generate.side_effect = [GenerationError("boom", status=500), "Second answer"]
        pipeline = make_pipeline()

        with pytest.raises(GenerationError):
            pipeline.run("First question?")
        result = pipeline.run("Second question?")

        assert result["answer"] == "Second answer"
        assert pipeline.state == "done"

    def test_progress_events_in_stage_order(self, make_pipeline, content_client):
        content_client.fetch_content.side_effect = fetch_from({"Quantum computing": "Qubits."})
        events = []

        make_pipeline().run("What is quantum computing?", progress=lambda e, m: events.append((e, m)))

        assert events == [
            ("found", "Found 2 relevant articles"),
            ("retrieving", "Retrieving: Quantum computing"),
            ("retrieving", "Retrieving: Quantum algorithm"),
            ("retrieval_failed", "Error retrieving Quantum algorithm: no content found for 'Quantum algorithm'"),
            ("generating", "Generating answer with llama2..."),
        ]

    def test_unexpected_error_marks_failed(self, make_pipeline, search_client):
        search_client.search.side_effect = RuntimeError("socket closed")
        pipeline = make_pipeline()

        with pytest.raises(RuntimeError):
            pipeline.run("What is quantum computing?")

        assert pipeline.state == "failed"

    def test_blank_question_rejected(self, make_pipeline, search_client):
        with pytest.raises(ValueError):
            make_pipeline().run("   ")

        search_client.search.assert_not_called()

    def test_model_override_passed_to_backend(self, make_pipeline, llm_client):
        result = make_pipeline().run("What is quantum computing?", model="mistral")

        assert llm_client.generate.call_args.kwargs["model"] == "mistral"
        assert result["metadata"]["model"] == "mistral"

    def test_truncation_applied_once(self, make_pipeline, content_client, config):
        long_text = "q" * 5000
        content_client.fetch_content.side_effect = None
        content_client.fetch_content.return_value = long_text
        pipeline = make_pipeline(**{"retrieval.max_chars_per_article": 1000})

        result = pipeline.run("What is quantum computing?")

        for block in result["context"].split("--- Article")[1:]:
            assert block.count("q") == 1000
        assert result["context"].count("...") == 2

    @pytest.mark.timeout(10)
    def test_concurrent_retrieval_preserves_search_order(self, make_pipeline, search_client, content_client):
        titles = ["Slow", "Medium", "Fast"]
        delays = {"Slow": 0.3, "Medium": 0.15, "Fast": 0.0}
        search_client.search.return_value = titles
        completed = []
        lock = threading.Lock()

        def _fetch(title):
            time.sleep(delays[title])
            with lock:
                completed.append(title)
            return f"{title} text"

        content_client.fetch_content.side_effect = _fetch
        pipeline = make_pipeline(**{"retrieval.max_workers": 3})

        result = pipeline.run("Which is fastest?")

        assert completed[0] == "Fast"
        assert [a["title"] for a in result["articles"]] == titles
        context = result["context"]
        assert context.index("Slow text") < context.index("Medium text") < context.index("Fast text")

    def test_sequential_retrieval_with_one_worker(self, make_pipeline, content_client):
        pipeline = make_pipeline(**{"retrieval.max_workers": 1})

        results = pipeline.retrieve(["Quantum computing", "Missing", "Quantum algorithm"])

        assert [r["title"] for r in results] == ["Quantum computing", "Missing", "Quantum algorithm"]
        assert "error" in results[1]
        assert content_client.fetch_content.call_count == 3

    def test_retrieve_empty(self, make_pipeline, content_client):
        assert make_pipeline().retrieve([]) == []
        content_client.fetch_content.assert_not_called()

    def test_builds_components_from_config(self, config):
        pipeline = WikiRAGPipeline(config)

        assert pipeline.search_client.limit == 3
        assert isinstance(pipeline.context_assembler, ContextAssembler)
        assert pipeline.llm_client.backend == "http"
        assert pipeline.state == "idle"
