"""
Exception Handlers for FastAPI Application.

``CapabilityError`` subclasses are mapped to status codes by their
``ErrorKind``. Any other exception is logged with an error id and request
context and answered with a 500.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from toolforge_ai.agent_core.errors import CapabilityError, ErrorKind, ValidationFailedError
from toolforge_ai.core.logging_config import get_logger

logger = get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.not_found: 404,
    ErrorKind.unauthorized: 403,
    ErrorKind.invalid_input: 400,
    ErrorKind.validation_failed: 422,
    ErrorKind.execution_failed: 500,
}


async def capability_exception_handler(request: Request, exc: CapabilityError) -> JSONResponse:
    """
    Map a runtime error to its status code.

    Args:
        request: The HTTP request that caused the exception
        exc: The runtime error that was raised

    Returns:
        JSONResponse with ``detail`` and ``kind`` (plus ``violations`` for
        validation failures)
    """
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    logger.info(f"{request.method} {request.url.path} failed with {exc.kind.value}: {exc}")

    content = {"detail": str(exc), "kind": exc.kind.value}
    if isinstance(exc, ValidationFailedError):
        content["violations"] = [
            {"context": v.context_name, "label": v.label, "message": v.message} for v in exc.violations
        ]
    return JSONResponse(status_code=status_code, content=content)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(CapabilityError, capability_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
