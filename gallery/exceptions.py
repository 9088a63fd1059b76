from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, List, Optional
import logging

from .schemas.common.common import ErrorResponse

logger = logging.getLogger(__name__)


def create_error_response(message: str, errors: Optional[List[Any]] = None) -> dict:
    """Create a standardized error body"""
    return ErrorResponse(message=message, errors=errors).model_dump(exclude_none=True)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException as ``{"message": ...}``; dict details pass through"""
    if isinstance(exc.detail, dict):
        content = create_error_response(
            str(exc.detail.get("message", "")), exc.detail.get("errors")
        )
    else:
        content = create_error_response(str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported as 400 rather than FastAPI's 422"""
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning(f"Request validation failed on {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content=create_error_response("Invalid request", errors))
