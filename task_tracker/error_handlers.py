"""Error responder: renders every failure as ``{message, errors?}``.

Handlers:
    - AppError -> status from the taxonomy table
    - RequestValidationError -> 400 with field violations
    - IntegrityError / SQLAlchemyError -> classified, then rendered as AppError
    - HTTPException (unknown route, wrong method) -> same body shape
    - Exception (catch-all) -> 500, detail only in development
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .errors import (
    CHALLENGE_KINDS,
    GENERIC_SERVER_MESSAGE,
    AppError,
    StoreFailure,
    ValidationFailed,
    classify_integrity_error,
)
from .validation import violations_from_request_errors

logger = logging.getLogger(__name__)


def render_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Build the response for a taxonomy error."""
    body = exc.to_response(debug=config.DEBUG)
    if exc.is_server_error:
        cause = exc.__cause__ or exc
        logger.error(
            f"{exc.kind.value} on {request.method} {request.url.path}: {cause}",
            exc_info=(type(cause), cause, cause.__traceback__),
        )
        if config.DEBUG:
            body["detail"] = str(cause)
            body["stack"] = traceback.format_exception(type(cause), cause, cause.__traceback__)
    else:
        logger.warning(f"{exc.kind.value} on {request.method} {request.url.path}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind in CHALLENGE_KINDS else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return render_app_error(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        failure = ValidationFailed(violations_from_request_errors(exc.errors()))
        return render_app_error(request, failure)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        failure = classify_integrity_error(exc)
        failure.__cause__ = exc
        return render_app_error(request, failure)

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        failure = StoreFailure()
        failure.__cause__ = exc
        return render_app_error(request, failure)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Catch-all; never leaks internals outside development."""
        failure = AppError(GENERIC_SERVER_MESSAGE)
        failure.__cause__ = exc
        return render_app_error(request, failure)
