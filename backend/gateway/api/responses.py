"""
JSON response helpers and exception handlers.

Every response leaving the gateway is JSON and carries the CORS headers;
failures always have an "error" field.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.config import settings
from gateway.exceptions import GatewayError
from gateway.schemas.attachment import ErrorResponse

logger = logging.getLogger(__name__)


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    }


def json_response(content: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=cors_headers())


def error_response(
    exc: GatewayError,
    message: Optional[str] = None,
    details: Optional[Any] = None
) -> JSONResponse:
    """
    Render a GatewayError.

    Args:
        exc: The error (decides the status code)
        message: Overrides exc.message in the "error" field
        details: Overrides exc.details
    """
    body = ErrorResponse(
        error=message or exc.message,
        details=details if details is not None else exc.details,
    )
    return json_response(body.model_dump(exclude_none=True), status_code=exc.status_code)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Handle gateway exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc}")
    else:
        logger.info(f"{type(exc).__name__}: {exc.message}")
    return error_response(exc)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing/parsing errors from Starlette (404, 405, bad multipart)."""
    return json_response(
        ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        status_code=exc.status_code,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: anything not mapped above is a 500."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return json_response(
        ErrorResponse(error=str(exc) or type(exc).__name__).model_dump(exclude_none=True),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
