"""Error taxonomy and the FastAPI handlers that render it.

Services raise `AppError` subclasses; handlers translate them to an HTTP
status plus `{"error": ..., "message": ...}`. Nothing is retried.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from donutsme.common.logging import logger


class AppError(Exception):
    """Base for errors that map onto one HTTP response."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str, error: str | None = None) -> None:
        self.message = message
        if error is not None:
            self.error = error
        super().__init__(message)


class ValidationFailed(AppError):
    status_code = 400
    error = "Invalid request"


class Unauthorized(AppError):
    status_code = 401
    error = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    error = "Forbidden"


class NotFound(AppError):
    status_code = 404
    error = "Not Found"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


class UpstreamError(AppError):
    """An external provider was unreachable or rejected the call."""

    status_code = 500
    error = "Upstream error"


class SignatureError(AppError):
    """Webhook body did not match its signature header."""

    status_code = 400
    error = "Webhook error"


def error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed method=%s path=%s status=%s error=%s message=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.error,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.error, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning("request_validation_failed path=%s errors=%s", request.url.path, errors)
    content = error_body("Invalid request", errors[0]["message"] if errors else "Validation error")
    content["errors"] = errors
    return JSONResponse(status_code=400, content=content)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s error=%s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content=error_body("Internal Server Error", "An unexpected error occurred"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
