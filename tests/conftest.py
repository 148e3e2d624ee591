from __future__ import annotations

import asyncio
from datetime import date
from typing import Dict, List

import pytest

from startup_companion.categories import CATEGORIES
from startup_companion.config import get_settings
from startup_companion.errors import StorageError
from startup_companion.generator import DocumentGenerator
from startup_companion.llm import PromptSpec
from startup_companion.mentors import DEFAULT_MENTORS
from startup_companion.schemas import DocumentCategory
from startup_companion.storage import InMemoryObjectStorage, ObjectStorage
from startup_companion.store import InMemoryStore

TODAY = date(2026, 10, 18)

NEUTRAL_GUIDE = "# Guide\n\n" + "Lorem ipsum dolor sit amet, consectetur adipiscing elit.\n" * 20


def category_for(spec: PromptSpec) -> DocumentCategory:
    for category, config in CATEGORIES.items():
        if config.prompt == spec.system_prompt:
            return category
    raise AssertionError("prompt does not belong to any category")


class FakeCompleter:
    """Scripted stand-in for ``CompletionClient``.

    ``responses`` maps a category to the text (or exception) it returns;
    ``gates`` holds events a category waits on before answering.
    """

    def __init__(
        self,
        default: str = NEUTRAL_GUIDE,
        responses: Dict[DocumentCategory, object] | None = None,
        gates: Dict[DocumentCategory, asyncio.Event] | None = None,
    ) -> None:
        self.default = default
        self.responses = dict(responses or {})
        self.gates = dict(gates or {})
        self.calls: List[PromptSpec] = []

    @property
    def model(self) -> str:
        return "test/model"

    async def complete(self, spec: PromptSpec) -> str:
        self.calls.append(spec)
        category = category_for(spec)
        gate = self.gates.get(category)
        if gate is not None:
            await gate.wait()
        response = self.responses.get(category, self.default)
        if isinstance(response, BaseException):
            raise response
        return response


class FailingStorage(ObjectStorage):
    async def upload(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        raise StorageError(f"Upload of {key} failed: bucket not found")

    async def remove(self, key: str) -> None:
        raise StorageError(f"Delete of {key} failed")


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Ensure cached settings do not leak between tests."""

    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(mentors=DEFAULT_MENTORS)


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def completer() -> FakeCompleter:
    return FakeCompleter()


@pytest.fixture
def generator(store: InMemoryStore, storage: InMemoryObjectStorage, completer: FakeCompleter) -> DocumentGenerator:
    return DocumentGenerator(store, storage, completer, model="test/model", today=lambda: TODAY)
