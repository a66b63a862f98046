"""Configuration loading and management utilities."""

from __future__ import annotations
import copy
from pathlib import Path
from typing import Any, Dict

import yaml

from .logger import get_logger


# Used as-is when no config file is found, and as the base that files are merged over
DEFAULT_CONFIG: Dict[str, Any] = {
    "wikipedia": {
        "api_url": "https://en.wikipedia.org/w/api.php",
        "user_agent": "RAG-CLI-App/1.0",
        "search_limit": 3,
        "timeout": 15,
    },
    "retrieval": {
        "max_chars_per_article": 1000,
        "truncation_marker": "...",
        "max_workers": 3,
    },
    "pipeline": {
        "on_empty_results": "fail",
    },
    "generation": {
        "backend": "http",
        "ollama_base_url": "http://localhost:11434",
        "model": "llama2",
        "timeout": 120,
        "command": ["ollama", "run", "{model}"],
        "prompt_template": "default",
    },
    "logging": {
        "level": "INFO",
        "console_level": "WARNING",
        "console_output": True,
        "file_output": True,
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "paths": {
        "logs_dir": "logs",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Configuration manager for the Wikipedia RAG pipeline."""

    def __init__(self, config_dict: Dict[str, Any], base_path: Path):
        """
        Initialize configuration.

        Args:
            config_dict: Dictionary containing configuration values
            base_path: Base path for resolving relative paths
        """
        self._config = config_dict
        self._base_path = base_path

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'wikipedia.api_url')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a value using dot notation, creating intermediate sections."""
        keys = key.split(".")
        section = self._config
        for k in keys[:-1]:
            section = section.setdefault(k, {})
        section[keys[-1]] = value

    def get_path(self, key: str, create: bool = False) -> Path:
        """
        Get a path from configuration and resolve it relative to base path.

        Args:
            key: Configuration key for the path
            create: Whether to create the directory if it doesn't exist

        Returns:
            Resolved Path object
        """
        path_str = self.get(key)
        if path_str is None:
            raise ValueError(f"Path configuration '{key}' not found")

        path = Path(path_str)
        if not path.is_absolute():
            path = self._base_path / path

        if create and not path.exists():
            path.mkdir(parents=True, exist_ok=True)

        return path

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access."""
        value = self.get(key)
        if value is None:
            raise KeyError(f"Configuration key '{key}' not found")
        return value

    @property
    def base_path(self) -> Path:
        """Get the base path for this configuration."""
        return self._base_path

    @classmethod
    def from_dict(cls, overrides: Dict[str, Any] = None, base_path: Path = None) -> "Config":
        """Build a config from the defaults with optional overrides merged in."""
        return cls(_deep_merge(DEFAULT_CONFIG, overrides or {}), base_path or Path.cwd())


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, looks for config.yaml
                    in default locations and falls back to built-in defaults.

    Returns:
        Config object

    Raises:
        FileNotFoundError: If an explicit configuration file does not exist
        yaml.YAMLError: If configuration file is invalid
    """
    logger = get_logger("config")

    if config_path is None:
        possible_paths = [
            Path("config/config.yaml"),
            Path("../config/config.yaml"),
            Path.cwd() / "config/config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            logger.debug(
                "No configuration file found (searched: %s), using defaults",
                ", ".join(str(p) for p in possible_paths),
            )
            return Config.from_dict()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    # Base path is the parent of the config directory
    base_path = config_path.resolve().parent.parent

    return Config(_deep_merge(DEFAULT_CONFIG, config_dict), base_path)
