"""
In-memory book store.
Holds book records in insertion order for the lifetime of the process.
"""

import secrets
import string
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

import structlog

from .models import Book

logger = structlog.get_logger(__name__)

ID_ALPHABET = string.ascii_letters + string.digits + "_-"
DEFAULT_ID_LENGTH = 16

IdGenerator = Callable[[], str]


def generate_book_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """Generate a random URL-safe book id."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class BookStore:
    """
    Ordered, lock-guarded collection of book records.

    Single operations are atomic on their own. Find-then-mutate sequences
    must run inside ``transaction()`` so that an index found in one call
    is still valid in the next.
    """

    def __init__(self, books: Optional[List[Book]] = None):
        self._books: List[Book] = list(books or [])
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["BookStore"]:
        """Hold exclusive access to the store for the duration of the block."""
        with self._lock:
            yield self

    def append(self, book: Book) -> None:
        with self._lock:
            self._books.append(book)
        logger.debug("Book stored", book_id=book.id, total=len(self._books))

    def find_by_id(self, book_id: str) -> Optional[Book]:
        with self._lock:
            for book in self._books:
                if book.id == book_id:
                    return book
        return None

    def find_index(self, book_id: str) -> Optional[int]:
        """Position of the book with ``book_id``, or None if absent."""
        with self._lock:
            for index, book in enumerate(self._books):
                if book.id == book_id:
                    return index
        return None

    def get_at(self, index: int) -> Book:
        with self._lock:
            return self._books[index]

    def replace_at(self, index: int, book: Book) -> Book:
        """Swap the record at ``index`` for ``book`` and return the old one."""
        with self._lock:
            previous = self._books[index]
            self._books[index] = book
        return previous

    def remove_at(self, index: int) -> Book:
        with self._lock:
            return self._books.pop(index)

    def snapshot(self) -> List[Book]:
        """Copy of the current records in insertion order."""
        with self._lock:
            return list(self._books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)
