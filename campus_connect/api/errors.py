"""
Exception handlers rendering every error as ``{"error": <message>}``.
"""
import logging
import re
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from campus_connect.utils.settings import get_app_settings

logger = logging.getLogger(__name__)

_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}
_VALUE_ERROR_PREFIX = "Value error, "
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _humanize(field: Any) -> str:
    words = _CAMEL_BOUNDARY.sub(" ", str(field)).replace("_", " ").strip().lower()
    return words[:1].upper() + words[1:] if words else "Field"


def format_validation_error(err: Dict[str, Any]) -> str:
    """Turn one pydantic error entry into a user-facing sentence."""
    loc = [p for p in err.get("loc", ()) if p not in _LOCATION_ROOTS and not isinstance(p, int)]
    if err.get("type") == "missing":
        return f"{_humanize(loc[-1])} is required" if loc else "Request body is required"
    if err.get("type") == "json_invalid":
        return "Malformed JSON body"
    msg = str(err.get("msg") or "Invalid value")
    if msg.startswith(_VALUE_ERROR_PREFIX):
        return msg[len(_VALUE_ERROR_PREFIX):]
    if loc:
        return f"{_humanize(loc[-1])}: {msg}"
    return msg


def _error_body(detail: Any) -> Dict[str, Any]:
    if isinstance(detail, dict):
        extra = dict(detail)
        message = extra.pop("message", None) or extra.pop("error", None) or "Error"
        return {"error": message, **extra}
    return {"error": detail if detail is not None else "Error"}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        body = {"error": "Route not found"}
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        # Unknown method on a known path is still an unknown route
        return JSONResponse({"error": "Route not found"}, status_code=status.HTTP_404_NOT_FOUND)
    else:
        body = _error_body(exc.detail)
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages: List[str] = [format_validation_error(e) for e in exc.errors()]
    first = messages[0] if messages else "Invalid request"
    return JSONResponse({"error": first, "errors": messages}, status_code=status.HTTP_400_BAD_REQUEST)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    if get_app_settings().is_production:
        message = "Internal server error"
    else:
        message = str(exc) or "Internal server error"
    return JSONResponse({"error": message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
