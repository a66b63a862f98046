#!/usr/bin/env python3
"""
Command-line entry point for Wikipedia-grounded question answering.

Commands:
- chat: interactive session, one question per line until 'exit'
- ask: answer a single question given as arguments and exit
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from .generation.llm_client import OllamaClient, create_llm_client
from .pipeline import FOUND, RETRIEVAL_FAILED, WikiRAGPipeline
from .utils.config import Config, load_config
from .utils.errors import GENERATING, RETRIEVING, describe_error
from .utils.logger import ROOT_LOGGER, get_logger, setup_logger


PROGRESS_ICONS = {
    FOUND: "📚",
    RETRIEVING: "📖",
    RETRIEVAL_FAILED: "⚠️ ",
    GENERATING: "\n🤖",
}


def setup_logging(config: Config, log_file_name: str = "wiki_rag.log") -> logging.Logger:
    """
    Set up logging based on configuration.

    Args:
        config: Configuration object
        log_file_name: Name of the log file

    Returns:
        Logger instance
    """
    file_output = config.get("logging.file_output", True)
    log_file = None
    if file_output:
        log_file = config.get_path("paths.logs_dir", create=True) / log_file_name

    return setup_logger(
        name=ROOT_LOGGER,
        level=config.get("logging.level", "INFO"),
        log_file=log_file,
        console_output=config.get("logging.console_output", True),
        file_output=file_output,
        log_format=config.get("logging.format"),
        console_level=config.get("logging.console_level"),
    )


def build_pipeline(args, config: Config) -> WikiRAGPipeline:
    """Apply CLI overrides to the config and build the pipeline."""
    if getattr(args, "backend", None):
        config.set("generation.backend", args.backend)
    if getattr(args, "model", None):
        config.set("generation.model", args.model)

    llm_client = create_llm_client(config)
    if isinstance(llm_client, OllamaClient):
        llm_client.check_connection()

    return WikiRAGPipeline(config, llm_client=llm_client)


def format_console_output(result: Dict[str, Any]) -> str:
    """
    Format a pipeline result for console display.

    Args:
        result: Result from WikiRAGPipeline.run()

    Returns:
        Formatted string for console output
    """
    lines = []
    if result["metadata"]["backend"] != "command":
        lines.append("\n📝 Answer:")
        lines.append(result["answer"] or "(the model returned an empty answer)")

    if result["used_fallback"]:
        lines.append("\n⚠️  No Wikipedia articles matched; answered without context.")

    if result["articles"] or result["failed"]:
        lines.append("\n📚 Sources:")
        for article in result["articles"]:
            lines.append(f"  📖 {article['title']}")
        for failure in result["failed"]:
            lines.append(f"  ⚠️  Skipped {failure['title']}: {failure['error']}")

    timing = result["metadata"]["timing"]
    lines.append(f"\n⏱️  {timing['total_time']}s (model: {result['metadata']['model']})")
    return "\n".join(lines)


def answer_question(pipeline: WikiRAGPipeline, question: str, out: TextIO = None) -> bool:
    """
    Run the pipeline for one question and print the outcome.

    Returns:
        True on success, False if the question failed
    """
    out = out or sys.stdout
    logger = get_logger("cli")

    def show_progress(event: str, message: str) -> None:
        print(f"{PROGRESS_ICONS.get(event, '')} {message}", file=out, flush=True)

    print("\n🔍 Searching Wikipedia...", file=out, flush=True)
    try:
        result = pipeline.run(question, progress=show_progress)
    except Exception as e:
        # A failed question never ends the session
        logger.error(f"Question failed: {e}", exc_info=True)
        print(f"\n❌ Error: {describe_error(e)}", file=out)
        return False

    print(format_console_output(result), file=out)
    return True


def cmd_chat(args, config: Config, stdin: TextIO = None, out: TextIO = None) -> None:
    """
    Interactive question loop.

    Args:
        args: Command-line arguments
        config: Configuration object
        stdin: Input stream (defaults to sys.stdin)
        out: Output stream (defaults to sys.stdout)
    """
    stdin = stdin or sys.stdin
    out = out or sys.stdout
    logger = setup_logging(config)
    logger.info("Starting CHAT session")

    pipeline = build_pipeline(args, config)

    print("=================================", file=out)
    print("RAG System: Ollama + Wikipedia", file=out)
    print("=================================", file=out)
    print(f"\nUsing model: {pipeline.llm_client.model} ({pipeline.llm_client.backend})", file=out)
    print("\nType your questions (or 'exit' to quit)", file=out)
    print("Example: What is quantum computing?", file=out)

    while True:
        print("\n> ", end="", file=out, flush=True)
        line = stdin.readline()
        if not line:
            break

        question = line.strip()
        if not question:
            continue
        if question.lower() == "exit":
            break

        answer_question(pipeline, question, out)

    print("Goodbye!", file=out)
    logger.info("CHAT session ended")


def cmd_ask(args, config: Config, out: TextIO = None) -> None:
    """
    Answer one question and exit non-zero on failure.

    Args:
        args: Command-line arguments
        config: Configuration object
        out: Output stream (defaults to sys.stdout)
    """
    out = out or sys.stdout
    logger = setup_logging(config)

    question = " ".join(args.question).strip()
    if not question:
        print("\n❌ Error: Question cannot be empty", file=out)
        print("\nUsage: wiki-rag ask \"your question here\"", file=out)
        sys.exit(1)

    logger.info("Starting ASK command")
    pipeline = build_pipeline(args, config)

    if not answer_question(pipeline, question, out):
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Answer questions with a local LLM grounded in Wikipedia articles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config/config.yaml, else built-in defaults)",
    )
    parser.add_argument(
        "--backend",
        choices=["http", "command"],
        default=None,
        help="Generation backend: Ollama HTTP API or a local command",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    chat_parser = subparsers.add_parser("chat", help="Interactive question loop")
    chat_parser.add_argument("--model", default=None, help="Model name (default: llama2)")

    ask_parser = subparsers.add_parser("ask", help="Answer a single question")
    ask_parser.add_argument("question", nargs="*", help="Question text")
    ask_parser.add_argument("--model", default=None, help="Model name (default: llama2)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    commands = {
        "chat": cmd_chat,
        "ask": cmd_ask,
    }

    try:
        commands[args.command](args, config)
    except ValueError as e:
        # Invalid configuration values (unknown backend, template or policy)
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
