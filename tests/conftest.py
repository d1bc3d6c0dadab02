"""Shared fixtures for proposal generator tests."""

import json

import pytest

from proposal_generator.context import ContextAssembler
from proposal_generator.generator import LetterGenerator
from proposal_generator.key_pool import KeyPool
from proposal_generator.orchestrator import ProposalOrchestrator
from proposal_generator.records import JsonRecordStore
from proposal_generator.retry import RetryExecutor
from proposal_generator.selector import RelevanceSelector


class FakeModelService:
    """Model service that replays scripted responses.

    Each scripted entry is either a string to return or an exception to
    raise. Every call is recorded with the prompt and key it used.
    """

    def __init__(self, responses=None, default="Generated cover letter"):
        self.responses = list(responses or [])
        self.default = default
        self.calls = []

    @property
    def prompts(self):
        return [prompt for prompt, _ in self.calls]

    @property
    def api_keys(self):
        return [api_key for _, api_key in self.calls]

    def complete(self, prompt, api_key):
        self.calls.append((prompt, api_key))
        response = self.responses.pop(0) if self.responses else self.default
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_model():
    return FakeModelService()


@pytest.fixture
def key_pool():
    return KeyPool(["key-a", "key-b", "key-c"])


@pytest.fixture
def executor(key_pool):
    return RetryExecutor(key_pool)


@pytest.fixture
def portfolio_rows():
    return [
        {"id": 1, "title": "Shopify Store Redesign", "link": "https://example.com/shopify",
         "description": "Shopify theme customization", "created_at": "2024-01-01T00:00:00"},
        {"id": 2, "title": "After Effects Explainer", "link": "https://example.com/ae",
         "description": "Motion graphics video", "created_at": "2024-01-02T00:00:00"},
        {"id": 3, "title": "React Dashboard", "link": "https://example.com/react",
         "description": "Analytics dashboard in React", "created_at": "2024-01-03T00:00:00"},
        {"id": 4, "title": "Logo Pack", "link": "https://example.com/logo",
         "description": "Brand identity", "created_at": "2024-01-04T00:00:00"},
        {"id": 5, "title": "WordPress Blog", "link": "https://example.com/wp",
         "description": "WordPress site build", "created_at": "2024-01-05T00:00:00"},
    ]


@pytest.fixture
def write_data(tmp_path):
    """Write a record store file and return its path."""
    def _write(data):
        data_file = tmp_path / "proposal_data.json"
        data_file.write_text(json.dumps(data))
        return data_file
    return _write


@pytest.fixture
def store(write_data, portfolio_rows):
    return JsonRecordStore(write_data({
        "portfolio_items": portfolio_rows,
        "personal_context": [{"content": "I am a full-stack developer with 8 years of experience."}],
        "proposal_rules": [{"content": "Never use the word 'synergy'."}],
    }))


@pytest.fixture
def build_orchestrator(executor):
    """Build an orchestrator around a store and a fake model."""
    def _build(record_store, model):
        return ProposalOrchestrator(
            assembler=ContextAssembler(record_store),
            selector=RelevanceSelector(executor, model),
            generator=LetterGenerator(executor, model),
        )
    return _build
