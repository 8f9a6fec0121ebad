"""
Request handlers for the bookshelf.

Each handler validates its input, reads or mutates the injected store and
returns a HandlerResponse holding the status code and the JSON envelope.
Domain errors are turned into ``fail`` envelopes here; anything else is
logged and reported as a generic 500.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from .errors import (
    BookshelfError, InternalError, InvalidPageRange, InvalidPayload,
    MissingName, NotFound
)
from .models import (
    Book, BookFilter, BookPayload, FailResponse, HandlerResponse,
    SuccessResponse, utc_now_iso
)
from .store import BookStore, IdGenerator, generate_book_id

logger = structlog.get_logger(__name__)

Clock = Callable[[], str]
PayloadInput = Union[BookPayload, Mapping[str, Any], None]

ADD_BOOK_ACTION = "add"
UPDATE_BOOK_ACTION = "update"


class BookHandlers:
    """Create, list, get, update and delete operations over a BookStore."""

    def __init__(
        self,
        store: BookStore,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None
    ):
        """
        Args:
            store: Store that owns the book records
            id_generator: Callable returning a fresh book id
            clock: Callable returning the current time as an ISO-8601 string
        """
        self.store = store
        self.id_generator = id_generator or generate_book_id
        self.clock = clock or utc_now_iso

    def add_book(self, payload: PayloadInput) -> HandlerResponse:
        """Validate and append a new book. 201 with the new id on success."""
        try:
            book_payload = self._coerce_payload(payload, ADD_BOOK_ACTION)
            self._validate(book_payload, ADD_BOOK_ACTION)

            book_id = self.id_generator()
            inserted_at = self.clock()
            book = Book.from_payload(book_id, book_payload, inserted_at=inserted_at, updated_at=inserted_at)
            self.store.append(book)
        except BookshelfError as e:
            return self._fail(e, operation="add_book")
        except Exception as e:
            logger.error("Failed to add book", error=str(e))
            return self._fail(InternalError(), operation="add_book")

        logger.info("Book added", book_id=book.id, name=book.name)
        return self._success(
            201,
            message="Book added successfully",
            data={"bookId": book.id}
        )

    def get_all_books(
        self,
        name: Optional[str] = None,
        reading: Optional[str] = None,
        finished: Optional[str] = None
    ) -> HandlerResponse:
        """
        List book projections matching every supplied filter.

        Args:
            name: Case-insensitive substring of the book name
            reading: "1" or "0"
            finished: "1" or "0"
        """
        try:
            book_filter = BookFilter.from_query(name=name, reading=reading, finished=finished)
            books = [book.projection().model_dump() for book in book_filter.apply(self.store.snapshot())]
        except BookshelfError as e:
            return self._fail(e, operation="get_all_books")
        except Exception as e:
            logger.error("Failed to list books", error=str(e))
            return self._fail(InternalError(), operation="get_all_books")

        return self._success(200, data={"books": books})

    def get_book_by_id(self, book_id: str) -> HandlerResponse:
        try:
            book = self.store.find_by_id(book_id)
            if book is None:
                raise NotFound("Book not found")
        except BookshelfError as e:
            return self._fail(e, operation="get_book_by_id", book_id=book_id)
        except Exception as e:
            logger.error("Failed to get book", book_id=book_id, error=str(e))
            return self._fail(InternalError(), operation="get_book_by_id")

        return self._success(200, data={"book": book.to_response()})

    def edit_book_by_id(self, book_id: str, payload: PayloadInput) -> HandlerResponse:
        """
        Replace every client-editable field of a book.

        Payload validation runs before the id lookup, so an invalid payload
        is reported as 400 even when the id does not exist.
        """
        try:
            book_payload = self._coerce_payload(payload, UPDATE_BOOK_ACTION)
            self._validate(book_payload, UPDATE_BOOK_ACTION)

            with self.store.transaction():
                index = self.store.find_index(book_id)
                if index is None:
                    raise NotFound("Failed to update book. Id not found")
                updated = self.store.get_at(index).revise(book_payload, updated_at=self.clock())
                self.store.replace_at(index, updated)
        except BookshelfError as e:
            return self._fail(e, operation="edit_book_by_id", book_id=book_id)
        except Exception as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            return self._fail(InternalError(), operation="edit_book_by_id")

        logger.info("Book updated", book_id=book_id)
        return self._success(200, message="Book updated successfully")

    def delete_book_by_id(self, book_id: str) -> HandlerResponse:
        try:
            with self.store.transaction():
                index = self.store.find_index(book_id)
                if index is None:
                    raise NotFound("Failed to delete book. Id not found")
                self.store.remove_at(index)
        except BookshelfError as e:
            return self._fail(e, operation="delete_book_by_id", book_id=book_id)
        except Exception as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            return self._fail(InternalError(), operation="delete_book_by_id")

        logger.info("Book deleted", book_id=book_id)
        return self._success(200, message="Book deleted successfully")

    @staticmethod
    def _coerce_payload(payload: PayloadInput, action: str) -> BookPayload:
        if payload is None:
            return BookPayload()
        if isinstance(payload, BookPayload):
            return payload
        try:
            return BookPayload.model_validate(payload)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "payload"
            raise InvalidPayload(f"Failed to {action} book. Invalid {field}: {first.get('msg')}")

    @staticmethod
    def _validate(payload: BookPayload, action: str) -> None:
        if not payload.has_name:
            raise MissingName(f"Failed to {action} book. Please provide the book name")
        if payload.exceeds_page_count:
            raise InvalidPageRange(
                f"Failed to {action} book. readPage must not be greater than pageCount"
            )

    @staticmethod
    def _success(
        status_code: int,
        message: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> HandlerResponse:
        body = SuccessResponse(message=message, data=data).to_body()
        return HandlerResponse(status_code=status_code, body=body)

    @staticmethod
    def _fail(error: BookshelfError, operation: str, **context: Any) -> HandlerResponse:
        if error.status_code < 500:
            logger.warning(
                "Request rejected",
                operation=operation,
                kind=error.kind,
                message=error.message,
                **context
            )
        return HandlerResponse(
            status_code=error.status_code,
            body=FailResponse(message=error.message).to_body()
        )
