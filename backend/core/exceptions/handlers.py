from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError

from core.utils.logging import structured_logger
from .api_exceptions import APIException
from .utils import format_error_response, get_correlation_id


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Review, moderation, authentication and database errors raised on purpose"""
    if exc.status_code >= 500:
        structured_logger.error(
            message=exc.message,
            metadata={"correlation_id": exc.correlation_id, "path": request.url.path},
            exception=exc,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            message=exc.message,
            status_code=exc.status_code,
            error_code=exc.error_code,
            correlation_id=exc.correlation_id,
            path=request.url.path,
            detail=exc.detail if exc.detail != exc.message else None,
        ),
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors such as unknown paths or methods"""
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            message=str(exc.detail),
            status_code=exc.status_code,
            error_code=f"HTTP_{exc.status_code}",
            path=request.url.path,
        )
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query strings, keyed by field path"""
    errors = {}
    for error in exc.errors():
        # Drop the leading 'body' / 'query' / 'path' segment
        field = ".".join(str(loc) for loc in error["loc"][1:]) or str(error["loc"][0])
        errors[field] = error["msg"]

    return JSONResponse(
        status_code=422,
        content=format_error_response(
            message="Validation failed",
            status_code=422,
            error_code="VALIDATION_ERROR",
            path=request.url.path,
            errors=errors,
        )
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected database failures; details stay in the log, not the response"""
    correlation_id = get_correlation_id()

    structured_logger.error(
        message="Database error while handling request",
        metadata={"correlation_id": correlation_id, "path": request.url.path},
        exception=exc,
    )

    return JSONResponse(
        status_code=500,
        content=format_error_response(
            message="A database error occurred",
            status_code=500,
            error_code="DATABASE_ERROR",
            correlation_id=correlation_id,
            path=request.url.path,
        )
    )
