"""
Bookshelf package: in-memory book inventory.

This package contains:
- Book record, payload and envelope models
- The in-memory book store
- Request handlers for create, list, get, update and delete
"""

from .errors import (
    BookshelfError, InternalError, InvalidFilter, InvalidPageRange,
    InvalidPayload, MissingName, NotFound
)
from .handlers import BookHandlers
from .models import Book, BookFilter, BookPayload, BookProjection, HandlerResponse
from .store import BookStore, generate_book_id

__version__ = "1.0.0"

__all__ = [
    "Book",
    "BookFilter",
    "BookHandlers",
    "BookPayload",
    "BookProjection",
    "BookStore",
    "BookshelfError",
    "HandlerResponse",
    "InternalError",
    "InvalidFilter",
    "InvalidPageRange",
    "InvalidPayload",
    "MissingName",
    "NotFound",
    "generate_book_id",
]
