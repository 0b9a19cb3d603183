"""
Exception handlers producing the {"error": {"code", "message", "details"?}} envelope.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List, Optional
import logging

from api.locales import get_message
from services.exceptions import GoalTrackerError
from user_context import get_current_locale

logger = logging.getLogger(__name__)

# Internal codes that are reported to clients under a broader public code
PUBLIC_ERROR_CODES = {
    "ai_provider_timeout": "ai_provider_error",
    "missing_api_key": "internal_error",
}

# Routes whose malformed bodies are answered with 400 invalid_payload instead of 422 validation_error
INVALID_PAYLOAD_ROUTES = {
    "/api/auth/register",
    "/api/auth/login",
    "/api/goals/sync-statuses",
}

# Routes that also report unparseable JSON as invalid_payload
MALFORMED_JSON_AS_PAYLOAD_ROUTES = {
    "/api/goals/sync-statuses",
}

def error_response(
    status_code: int,
    code: str,
    message: Optional[str] = None,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message or get_message(code, get_current_locale())}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)

def _format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        ctx_error = (err.get("ctx") or {}).get("error")
        if ctx_error:
            message = str(ctx_error)
        elif err.get("type") == "extra_forbidden":
            message = get_message("unknown_field", get_current_locale())
        else:
            message = err.get("msg", "")
        details.append({
            "field": ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else ""),
            "message": message,
        })
    return details

async def goaltracker_error_handler(request: Request, exc: GoalTrackerError) -> JSONResponse:
    code = PUBLIC_ERROR_CODES.get(exc.code, exc.code)
    status_code = exc.status_code
    if exc.code == "missing_api_key":
        logger.error(f"{request.method} {request.url.path} failed: AI provider key is not configured")
    elif status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed with {exc.code}")

    message = exc.message
    if message is None and code == "rate_limited":
        retry_after = (exc.details or {}).get("retryAfter", "")
        message = get_message("rate_limited", get_current_locale(), retry_after=retry_after)
    return error_response(status_code, code, message, exc.details, exc.headers)

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = list(exc.errors())
    sources = {err.get("loc", ("body",))[0] for err in errors}

    if "path" in sources:
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid_path_params",
                              details=_format_validation_errors([e for e in errors if e["loc"][0] == "path"]))
    if "query" in sources:
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid_query_params",
                              details=_format_validation_errors([e for e in errors if e["loc"][0] == "query"]))
    route = request.scope.get("route")
    route_path = getattr(route, "path", request.url.path)
    if any(err.get("type") == "json_invalid" for err in errors):
        if route_path in MALFORMED_JSON_AS_PAYLOAD_ROUTES:
            return error_response(status.HTTP_400_BAD_REQUEST, "invalid_payload")
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid_json")

    details = _format_validation_errors(errors)
    if route_path in INVALID_PAYLOAD_ROUTES:
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid_payload", details=details)
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", details=details)

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = {
        status.HTTP_401_UNAUTHORIZED: "not_authenticated",
        status.HTTP_404_NOT_FOUND: "not_found",
        status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    }.get(exc.status_code, "internal_error" if exc.status_code >= 500 else "invalid_payload")
    message = exc.detail if isinstance(exc.detail, str) else None
    return error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))

async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error")

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GoalTrackerError, goaltracker_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
