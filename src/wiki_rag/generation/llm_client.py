"""Text generation backends: Ollama HTTP API and a local command."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
import subprocess

import requests
from requests.exceptions import RequestException, Timeout

from ..utils.errors import GenerationError
from ..utils.logger import get_logger


class LLMClient(ABC):
    """Capability shared by every generation backend."""

    backend: str = "unknown"

    def __init__(self, model: str, timeout: float, logger_name: str):
        self.model = model
        self.timeout = timeout
        self.logger = get_logger(logger_name)

    @abstractmethod
    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        """
        Produce the answer text for a prompt.

        Args:
            prompt: Complete prompt
            model: Override the configured model

        Returns:
            Generated text (may be empty)

        Raises:
            GenerationError: If the backend fails
        """


class OllamaClient(LLMClient):
    """
    Client for the Ollama ``/api/generate`` endpoint.

    Sends a single non-streamed request and returns the whole reply.
    """

    backend = "http"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama2",
        timeout: float = 120,
        logger_name: str = "ollama_client",
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama API base URL
            model: Model name (e.g., "llama2", "llama3.2:3b", "mistral")
            timeout: Request timeout in seconds
            logger_name: Logger name
        """
        super().__init__(model, timeout, logger_name)
        self.base_url = base_url.rstrip("/")
        self.generate_url = f"{self.base_url}/api/generate"

    def check_connection(self) -> bool:
        """
        Check whether Ollama is reachable and the model is pulled.

        Only logs what it finds; never raises.

        Returns:
            True if the server answered
        """
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=5)
            response.raise_for_status()
            models = response.json().get("models", [])
        except (RequestException, ValueError, AttributeError) as e:
            self.logger.warning(
                f"Cannot reach Ollama at {self.base_url} ({e}). "
                f"Ensure Ollama is running: 'ollama serve'"
            )
            return False

        model_names = [m.get("name", "") for m in models if isinstance(m, dict)]
        if self.model in model_names or f"{self.model}:latest" in model_names:
            self.logger.info(f"Model '{self.model}' is available")
        else:
            self.logger.warning(
                f"Model '{self.model}' not found. Available models: {model_names}. "
                f"Run: ollama pull {self.model}"
            )
        return True

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        model = model or self.model
        self.logger.info(f"Generating completion with {model}")
        self.logger.debug(f"Prompt length: {len(prompt)} chars")

        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
        }

        try:
            response = requests.post(
                self.generate_url,
                json=payload,
                timeout=self.timeout,
            )
        except Timeout as e:
            raise GenerationError(f"Ollama request timed out after {self.timeout}s") from e
        except RequestException as e:
            raise GenerationError(f"Ollama request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise GenerationError(
                f"Ollama returned status {response.status_code}",
                status=response.status_code,
                body=response.text,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise GenerationError(
                f"failed to parse Ollama response ({e})", body=response.text
            ) from e

        if not isinstance(result, dict) or not isinstance(result.get("response"), str):
            raise GenerationError("Ollama response has no 'response' text", body=response.text)

        if not result.get("done", True):
            self.logger.warning("Ollama reported done=false for a non-streamed request")

        generated_text = result["response"]
        self.logger.info(f"Generated {len(generated_text)} characters")
        return generated_text


class CommandLineClient(LLMClient):
    """
    Runs a local executable with the prompt as its last argument.

    The child inherits stdout and stderr, so its output reaches the console
    directly and ``generate`` returns an empty string. The exit status is the
    only success signal.
    """

    backend = "command"

    def __init__(
        self,
        command: List[str] = None,
        model: str = "llama2",
        timeout: Optional[float] = 120,
        logger_name: str = "command_client",
    ):
        """
        Initialize command client.

        Args:
            command: Executable and leading arguments; "{model}" is replaced
                     with the model name
            model: Model name
            timeout: Seconds before the process is killed (None waits forever)
            logger_name: Logger name
        """
        super().__init__(model, timeout, logger_name)
        self.command = list(command or ["ollama", "run", "{model}"])

    def build_command(self, prompt: str, model: Optional[str] = None) -> List[str]:
        model = model or self.model
        return [part.replace("{model}", model) for part in self.command] + [prompt]

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        cmd = self.build_command(prompt, model)
        self.logger.info(f"Running generation command: {' '.join(cmd[:-1])} <prompt>")

        try:
            result = subprocess.run(cmd, timeout=self.timeout, check=False)
        except subprocess.TimeoutExpired as e:
            raise GenerationError(
                f"'{cmd[0]}' timed out after {self.timeout}s"
            ) from e
        except OSError as e:
            raise GenerationError(f"could not run '{cmd[0]}': {e}") from e

        if result.returncode != 0:
            raise GenerationError(
                f"'{cmd[0]}' exited with code {result.returncode}",
                exit_code=result.returncode,
            )

        return ""


def create_llm_client(config, backend: str = None, model: str = None) -> LLMClient:
    """
    Create the generation backend selected by configuration.

    Args:
        config: Configuration object
        backend: Override ``generation.backend`` ("http" or "command")
        model: Override ``generation.model``

    Returns:
        LLMClient instance
    """
    backend = backend or config.get("generation.backend", "http")
    model = model or config.get("generation.model", "llama2")
    timeout = config.get("generation.timeout", 120)

    if backend == "http":
        return OllamaClient(
            base_url=config.get("generation.ollama_base_url", "http://localhost:11434"),
            model=model,
            timeout=timeout,
        )
    if backend == "command":
        return CommandLineClient(
            command=config.get("generation.command"),
            model=model,
            timeout=timeout,
        )
    raise ValueError(f"Unknown generation backend '{backend}' (expected 'http' or 'command')")
