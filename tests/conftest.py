"""
Pytest configuration and shared fixtures.
"""

import itertools

import pytest

from bookshelf.handlers import BookHandlers
from bookshelf.models import BookPayload
from bookshelf.store import BookStore


class SequentialIds:
    """Deterministic id generator: book-0001, book-0002, ..."""

    def __init__(self):
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"book-{next(self._counter):04d}"


class SteppingClock:
    """Clock returning a strictly increasing timestamp on every call."""

    def __init__(self):
        self._seconds = itertools.count(0)

    def __call__(self) -> str:
        return f"2024-01-15T10:30:{next(self._seconds):02d}.000Z"


@pytest.fixture
def store():
    """Create an empty book store."""
    return BookStore()


@pytest.fixture
def id_generator():
    return SequentialIds()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def handlers(store, id_generator, clock):
    """Create handlers over the test store with deterministic ids and clock."""
    return BookHandlers(store, id_generator=id_generator, clock=clock)


@pytest.fixture
def sample_payload():
    """Sample create payload, as a client would send it."""
    return {
        "name": "Bumi",
        "year": 2014,
        "author": "Tere Liye",
        "summary": "Raib discovers she can disappear.",
        "publisher": "Gramedia Pustaka Utama",
        "pageCount": 440,
        "readPage": 25,
        "reading": True,
    }


@pytest.fixture
def make_payload(sample_payload):
    """Factory for payload models based on the sample with overrides."""
    def _make(**overrides):
        data = dict(sample_payload)
        data.update(overrides)
        return BookPayload.model_validate(data)
    return _make
