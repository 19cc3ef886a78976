"""FastAPI transport for the book record service.

Routes:
    GET    /api/books                        list all books
    POST   /api/books                        create a book
    PUT    /api/books/{position}             update a book
    DELETE /api/books/{position}             delete a book
    GET    /api/books/{position}/content     read content (?mode=blocking|non-blocking)
    POST   /api/books/{position}/content     write content ({"content": "..."})

Every response body is the envelope {success, data, message, errors}.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf.config import Config
from bookshelf.models import ErrorKind, ServiceResult
from bookshelf.service import RecordService, build_service
from bookshelf.validate import MalformedInput, parse_json_object

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.MALFORMED_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.IO_ERROR: 500,
    ErrorKind.INTERNAL_INCONSISTENCY: 500,
}


def envelope_response(result: ServiceResult, success_status: int = 200) -> JSONResponse:
    """Render a ServiceResult with the status code matching its outcome."""
    status = success_status if result.success else STATUS_BY_KIND.get(result.kind, 500)
    return JSONResponse(status_code=status, content=result.to_envelope())


def _malformed(message: str) -> JSONResponse:
    return envelope_response(ServiceResult.fail(ErrorKind.MALFORMED_INPUT, message))


def create_app(service: Optional[RecordService] = None, config: Optional[Config] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        service: Service to expose (built from config when omitted)
        config: Application configuration

    Returns:
        Configured FastAPI application
    """
    config = config or Config()
    service = service or build_service(config)

    app = FastAPI(
        title="Bookshelf API",
        description="Book records with per-book content documents",
        version="0.1.0",
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _malformed("Invalid request parameters")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=ServiceResult(success=False, message=message).to_envelope(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=ServiceResult(success=False, message="Internal server error").to_envelope(),
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    @app.get("/api/books", tags=["books"])
    async def list_books():
        return envelope_response(await run_in_threadpool(service.list_all))

    @app.post("/api/books", tags=["books"])
    async def create_book(request: Request):
        try:
            raw = parse_json_object(await request.body())
        except MalformedInput:
            return _malformed("Invalid JSON payload")
        result = await run_in_threadpool(service.create, raw)
        return envelope_response(result, success_status=201)

    @app.put("/api/books/{position}", tags=["books"])
    async def update_book(position: int, request: Request):
        try:
            raw = parse_json_object(await request.body())
        except MalformedInput:
            return _malformed("Invalid JSON payload")
        return envelope_response(await run_in_threadpool(service.update, position, raw))

    @app.delete("/api/books/{position}", tags=["books"])
    async def delete_book(position: int):
        return envelope_response(await run_in_threadpool(service.delete, position))

    @app.get("/api/books/{position}/content", tags=["content"])
    async def read_content(position: int, mode: Optional[str] = None):
        return envelope_response(await service.read_content(position, mode))

    @app.post("/api/books/{position}/content", tags=["content"])
    async def write_content(position: int, request: Request):
        try:
            raw = parse_json_object(await request.body())
        except MalformedInput:
            return _malformed("Invalid JSON payload")
        return envelope_response(await service.write_content(position, raw.get("content")))

    return app
