"""
Global exception handlers.

- CareerHubError -> its own status and {"error": {...}} envelope
- RequestValidationError -> 400 INVALID_INPUT with field details
- anything else -> 500 INTERNAL_ERROR, no internals leaked
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from careerhub.core.errors import CareerHubError, ErrorCategory
from careerhub.core.logging import get_logger

logger = get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CareerHubError, _careerhub_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


async def _careerhub_error_handler(request: Request, exc: CareerHubError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.info
    log("request_error", code=exc.code, message=exc.message, status_code=exc.http_status)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.info("request_validation_failed", errors=details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "INVALID_INPUT",
                "message": "Invalid request data",
                "category": ErrorCategory.VALIDATION.value,
                "details": details,
            }
        },
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": ErrorCategory.INTERNAL.value,
            }
        },
    )
