"""
Pydantic models for book records, request payloads and response envelopes.
Field names follow the snake_case convention in Python and serialize with
the camelCase aliases clients send and receive.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .errors import InvalidFilter


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-01-15T10:30:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_flag(field_name: str, raw: Optional[str]) -> Optional[bool]:
    """
    Parse a "1"/"0" query flag.

    Args:
        field_name: Query parameter name, used in the error message
        raw: Raw query value, or None when the parameter was not sent

    Returns:
        True for "1", False for "0", None when absent

    Raises:
        InvalidFilter: For any other value
    """
    if raw is None:
        return None
    if raw == "1":
        return True
    if raw == "0":
        return False
    raise InvalidFilter(f"Invalid value for '{field_name}': expected 1 or 0")


class BookPayload(BaseModel):
    """
    Client-supplied book fields for create and update.

    Every field is optional here so a missing name is reported by the
    handler's own validation rather than by the schema.
    """
    name: Optional[str] = Field(None, description="Book title")
    year: Optional[int] = Field(None, description="Publication year")
    author: Optional[str] = Field(None, description="Book author")
    summary: Optional[str] = Field(None, description="Short summary")
    publisher: Optional[str] = Field(None, description="Publisher name")
    page_count: Optional[int] = Field(None, ge=0, alias="pageCount", description="Total number of pages")
    read_page: Optional[int] = Field(None, ge=0, alias="readPage", description="Last page read")
    reading: Optional[bool] = Field(None, description="Whether the book is being read")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "name": "Bumi",
                "year": 2014,
                "author": "Tere Liye",
                "summary": "Raib discovers she can disappear.",
                "publisher": "Gramedia Pustaka Utama",
                "pageCount": 440,
                "readPage": 25,
                "reading": True,
            }
        },
    }

    @property
    def has_name(self) -> bool:
        return bool(self.name and self.name.strip())

    @property
    def exceeds_page_count(self) -> bool:
        """True when both page fields are present and readPage is past pageCount."""
        if self.read_page is None or self.page_count is None:
            return False
        return self.read_page > self.page_count


class BookProjection(BaseModel):
    """Reduced view of a book returned by the list operation."""
    id: str
    name: str
    publisher: Optional[str] = None


class Book(BaseModel):
    """
    A stored book record.

    Instances are frozen: an update builds a new record and the store
    swaps it in place of the old one.
    """
    id: str = Field(..., description="Unique book identifier")
    name: str = Field(..., min_length=1, description="Book title")
    year: Optional[int] = None
    author: Optional[str] = None
    summary: Optional[str] = None
    publisher: Optional[str] = None
    page_count: Optional[int] = Field(None, ge=0, alias="pageCount")
    read_page: Optional[int] = Field(None, ge=0, alias="readPage")
    finished: bool = Field(..., description="Whether readPage equals pageCount")
    reading: Optional[bool] = None
    inserted_at: str = Field(..., alias="insertedAt", description="Creation timestamp")
    updated_at: str = Field(..., alias="updatedAt", description="Last update timestamp")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_payload(
        cls,
        book_id: str,
        payload: BookPayload,
        inserted_at: str,
        updated_at: str
    ) -> "Book":
        """Build a record from a validated payload, deriving ``finished``."""
        return cls(
            id=book_id,
            name=payload.name,
            year=payload.year,
            author=payload.author,
            summary=payload.summary,
            publisher=payload.publisher,
            page_count=payload.page_count,
            read_page=payload.read_page,
            finished=payload.read_page == payload.page_count,
            reading=payload.reading,
            inserted_at=inserted_at,
            updated_at=updated_at,
        )

    def revise(self, payload: BookPayload, updated_at: str) -> "Book":
        """Return a replacement record keeping this record's id and insertedAt."""
        return Book.from_payload(self.id, payload, inserted_at=self.inserted_at, updated_at=updated_at)

    def projection(self) -> BookProjection:
        return BookProjection(id=self.id, name=self.name, publisher=self.publisher)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class BookFilter(BaseModel):
    """Conjunctive filter for the list operation. Unset criteria match everything."""
    name: Optional[str] = Field(None, description="Case-insensitive substring of the name")
    reading: Optional[bool] = None
    finished: Optional[bool] = None

    @classmethod
    def from_query(
        cls,
        name: Optional[str] = None,
        reading: Optional[str] = None,
        finished: Optional[str] = None
    ) -> "BookFilter":
        """Build a filter from raw query strings. Raises InvalidFilter on malformed flags."""
        return cls(
            name=name or None,
            reading=parse_flag("reading", reading),
            finished=parse_flag("finished", finished),
        )

    def matches(self, book: Book) -> bool:
        if self.name is not None and self.name.lower() not in book.name.lower():
            return False
        if self.reading is not None and book.reading != self.reading:
            return False
        if self.finished is not None and book.finished != self.finished:
            return False
        return True

    def apply(self, books: List[Book]) -> List[Book]:
        return [book for book in books if self.matches(book)]


class SuccessResponse(BaseModel):
    """Success envelope. ``message`` and ``data`` are omitted when unset."""
    status: str = "success"
    message: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"status": self.status}
        if self.message is not None:
            body["message"] = self.message
        if self.data is not None:
            body["data"] = self.data
        return body


class FailResponse(BaseModel):
    """Fail envelope."""
    status: str = "fail"
    message: str

    def to_body(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


class HandlerResponse(BaseModel):
    """Status code and JSON body produced by a handler."""
    status_code: int
    body: Dict[str, Any]
