"""Application errors and the JSON error envelope."""

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went very wrong! Please try again later."


class AppError(Exception):
    """An expected failure carrying the HTTP status to report."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = "fail" if 400 <= status_code < 500 else "error"
        self.is_operational = True


def success_body(message: str, data: Any, **pagination) -> Dict[str, Any]:
    """Success envelope; pagination fields are included only when given."""
    body = {"status": "success", "message": message, "data": data}
    body.update({key: value for key, value in pagination.items() if value is not None})
    return body


def error_body(status_code: int, message: str, exc: Optional[BaseException] = None, expose_stack: bool = False) -> Dict[str, Any]:
    body = {
        "status": "fail" if 400 <= status_code < 500 else "error",
        "message": message,
    }
    if expose_stack and exc is not None:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def register_exception_handlers(app: FastAPI, expose_stack: bool) -> None:
    """Route every handled exception through the error envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.message, exc, expose_stack),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
            message = f"Can't find {request.url.path} on this server!"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, message, exc, expose_stack),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "query")
            message = f"Invalid {location}: {first.get('msg')}" if location else first.get("msg")
        else:
            message = "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(status.HTTP_400_BAD_REQUEST, message, exc, expose_stack),
        )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence: any unhandled exception becomes a generic 500."""

    def __init__(self, app, expose_stack: bool = False):
        super().__init__(app)
        self.expose_stack = expose_stack

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body(500, GENERIC_ERROR_MESSAGE, e, self.expose_stack),
            )
