"""Shared pytest setup: puts src/ on sys.path and provides a fresh store."""

import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parent.parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from collab_store.persistence.memory import InMemoryDocumentStore  # noqa: E402


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()
