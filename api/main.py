"""
FastAPI main application for the Bookshelf API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import partial
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import config as api_config
from api.models import HealthResponse
from bookshelf.errors import InternalError, InvalidPayload
from bookshelf.handlers import BookHandlers
from bookshelf.models import BookPayload, FailResponse, HandlerResponse
from bookshelf.store import BookStore, generate_book_id
from utilities.config import config

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_handlers(request: Request) -> BookHandlers:
    """Dependency returning the handlers bound to this application."""
    return request.app.state.handlers


def to_json_response(result: HandlerResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


# Exception handlers
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report schema errors with the fail envelope instead of FastAPI's 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or "request"
    error = InvalidPayload(f"Invalid {field}: {first.get('msg', 'malformed value')}")
    logger.warning("Request validation failed", path=request.url.path, field=field)
    return JSONResponse(
        status_code=error.status_code,
        content=FailResponse(message=error.message).to_body()
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle exceptions that escaped the book handlers."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    message = str(exc) if api_config.debug else InternalError().message
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=FailResponse(message=message).to_body()
    )


# Health check endpoint
@router.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(handlers: BookHandlers = Depends(get_handlers)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=api_config.api_version,
        books=len(handlers.store)
    )


# Books endpoints
@router.post("/books", status_code=status.HTTP_201_CREATED, tags=["Books"])
def add_book(
    payload: Optional[BookPayload] = None,
    handlers: BookHandlers = Depends(get_handlers)
):
    """
    Add a book.

    - **name**: required, non-empty
    - **readPage**: must not be greater than **pageCount**
    """
    return to_json_response(handlers.add_book(payload))


@router.get("/books", tags=["Books"])
def get_all_books(
    name: Optional[str] = None,
    reading: Optional[str] = None,
    finished: Optional[str] = None,
    handlers: BookHandlers = Depends(get_handlers)
):
    """
    List books as `{id, name, publisher}` projections in insertion order.

    - **name**: case-insensitive substring of the book name
    - **reading**: 1 for books being read, 0 for the rest
    - **finished**: 1 for finished books, 0 for the rest
    """
    return to_json_response(handlers.get_all_books(name=name, reading=reading, finished=finished))


@router.get("/books/{book_id}", tags=["Books"])
def get_book_by_id(book_id: str, handlers: BookHandlers = Depends(get_handlers)):
    """Get the full record of a single book."""
    return to_json_response(handlers.get_book_by_id(book_id))


@router.put("/books/{book_id}", tags=["Books"])
def edit_book_by_id(
    book_id: str,
    payload: Optional[BookPayload] = None,
    handlers: BookHandlers = Depends(get_handlers)
):
    """Replace the editable fields of a book."""
    return to_json_response(handlers.edit_book_by_id(book_id, payload))


@router.delete("/books/{book_id}", tags=["Books"])
def delete_book_by_id(book_id: str, handlers: BookHandlers = Depends(get_handlers)):
    """Delete a book."""
    return to_json_response(handlers.delete_book_by_id(book_id))


def create_app(handlers: Optional[BookHandlers] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        handlers: Handlers to serve. A fresh store and default handlers
            are created when omitted.
    """
    if handlers is None:
        handlers = BookHandlers(
            BookStore(),
            id_generator=partial(generate_book_id, config.id_length)
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Bookshelf API", books=len(app.state.handlers.store))
        yield
        logger.info("Shutting down Bookshelf API", books=len(app.state.handlers.store))

    app = FastAPI(
        title=api_config.api_title,
        description=api_config.api_description,
        version=api_config.api_version,
        lifespan=lifespan
    )
    app.state.handlers = handlers

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=api_config.cors_allow_credentials,
        allow_methods=api_config.cors_allow_methods,
        allow_headers=api_config.cors_allow_headers,
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.include_router(router)

    return app


# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level="info"
    )
