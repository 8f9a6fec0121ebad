"""
Error taxonomy for bookshelf operations.

Every error carries the HTTP status code it maps to and a human-readable
message. Handlers raise these internally and turn them into ``fail``
envelopes at their boundary.
"""


class BookshelfError(Exception):
    """Base class for errors recovered at the handler boundary."""

    status_code: int = 500
    kind: str = "BookshelfError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingName(BookshelfError):
    """The payload has no usable book name."""

    status_code = 400
    kind = "MissingName"


class InvalidPageRange(BookshelfError):
    """readPage is greater than pageCount."""

    status_code = 400
    kind = "InvalidPageRange"


class InvalidPayload(BookshelfError):
    """The payload does not fit the book schema."""

    status_code = 400
    kind = "InvalidPayload"


class InvalidFilter(BookshelfError):
    """A list query flag is neither "1" nor "0"."""

    status_code = 400
    kind = "InvalidFilter"


class NotFound(BookshelfError):
    status_code = 404
    kind = "NotFound"


class InternalError(BookshelfError):
    """Unexpected failure. The message never includes the cause."""

    status_code = 500
    kind = "InternalError"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
