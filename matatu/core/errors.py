"""
Domain errors and their HTTP mapping.

Services raise the classes below; the handlers registered by
``install_error_handlers`` turn them into ``{"error": "..."}`` bodies.
FastAPI's own HTTPException / RequestValidationError are rendered in the
same shape so clients only ever parse one error format.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MatatuError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MatatuError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(MatatuError):
    # duplicates are reported as plain bad requests
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(MatatuError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(MatatuError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(MatatuError):
    status_code = status.HTTP_404_NOT_FOUND


class DependencyError(MatatuError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str) -> dict:
    return {"error": message}


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header", "form")]
    field = ".".join(loc)
    msg = err.get("msg", "invalid value")
    return f"Invalid value for {field}: {msg}" if field else msg


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MatatuError)
    async def _matatu_error(request: Request, exc: MatatuError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST,
                            content=error_body(_first_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(status_code=exc.status_code, content=error_body(detail),
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        logger.error("datastore failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            content=error_body("Internal Server Error"))
