"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all test modules.
"""

import pytest
from unittest.mock import Mock

from wiki_rag.utils.config import Config


@pytest.fixture
def config():
    """Default configuration with logging kept off the console and disk."""
    return Config.from_dict(
        {"logging": {"console_output": False, "file_output": False}}
    )


@pytest.fixture
def make_response():
    """Factory for fake ``requests`` responses."""

    def _make(status_code=200, json_data=None, text=None, json_error=None):
        response = Mock()
        response.status_code = status_code
        response.text = text if text is not None else str(json_data)
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = json_data
        return response

    return _make


@pytest.fixture
def search_payload():
    """Search response for 'What is quantum computing?'."""
    return {
        "batchcomplete": "",
        "query": {
            "searchinfo": {"totalhits": 2},
            "search": [
                {"ns": 0, "title": "Quantum computing", "snippet": "A <span>quantum</span> computer..."},
                {"ns": 0, "title": "Quantum algorithm", "snippet": "In quantum computing, a quantum algorithm..."},
            ],
        },
    }


@pytest.fixture
def page_payload():
    """Factory for extract responses holding a single page."""

    def _make(title="Quantum computing", extract="A quantum computer exploits superposition.", page_id="25220"):
        return {
            "batchcomplete": "",
            "query": {
                "pages": {
                    page_id: {"pageid": int(page_id), "ns": 0, "title": title, "extract": extract}
                }
            },
        }

    return _make


@pytest.fixture
def missing_page_payload():
    """Extract response for a title that does not exist."""
    return {
        "batchcomplete": "",
        "query": {"pages": {"-1": {"ns": 0, "title": "Nonexistent article", "missing": ""}}},
    }
