from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from app.common.exceptions import AppError, Unauthorized
from app.common.response import ErrorResponse
from app.logger_config import logger


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid input")
    return f"{field}: {message}" if field else message


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.info(f"{request.method} {request.url.path} failed: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return ErrorResponse.send(exc.message, exc.status_code, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return ErrorResponse.send(_first_validation_message(exc), status.HTTP_400_BAD_REQUEST)

    # Handle HTTP (e.g. 404, 405)
    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return ErrorResponse.send(exc.detail, exc.status_code, headers=getattr(exc, "headers", None))

    # Handle all other exceptions (coding, DB errors, etc.)
    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return ErrorResponse.send("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)
