from __future__ import annotations

from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hospital_finder.exceptions import HospitalFinderError
from hospital_finder.utils.logger import get_logger

logger = get_logger(__name__)


def _error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **extra},
    )


def available_routes(app: FastAPI) -> List[str]:
    # Read from the OpenAPI document: included routers are not always flattened into app.routes
    routes = []
    for path, operations in app.openapi().get("paths", {}).items():
        for method in sorted(operations):
            routes.append(f"{method.upper()} {path}")
    return routes


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # loc starts with "body" / "query" / "path"
        location = ".".join(str(item) for item in err.get("loc", ())[1:]) or "request"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"


async def handle_domain_error(request: Request, exc: HospitalFinderError) -> JSONResponse:
    logger.info(
        "request.rejected",
        method=request.method,
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.error,
        message=exc.message,
    )
    return _error_response(exc.status_code, exc.error, exc.message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_errors(exc)
    logger.info("request.invalid", method=request.method, path=request.url.path, message=message)
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation Error", message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # An unknown method on a known path is reported like an unknown path
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return _error_response(
            status.HTTP_404_NOT_FOUND,
            "Not Found",
            f"Route {request.method} {request.url.path} not found",
            availableRoutes=available_routes(request.app),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request.failed",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        str(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HospitalFinderError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
