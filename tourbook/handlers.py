"""Exception handlers.

Every error response has the same body as ``TourbookError.to_response()``:
``{"success": false, "error": <message>, "code": <ErrorCode>, ...extras}``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from tourbook.config import get_settings
from tourbook.errors import USER_MESSAGES, ErrorCode, TourbookError
from tourbook.utils.logger import get_logger

logger = get_logger("errors")


def _error_body(code: ErrorCode, error: str | None = None, **extra) -> dict:
    return {"success": False, "error": error or USER_MESSAGES[code], "code": code.value, **extra}


async def handle_tourbook_error(request: Request, exc: TourbookError) -> JSONResponse:
    logger.info(f"{exc.code.value} ({exc.status_code}) on {request.method} {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit {exc.detail} hit on {request.url.path}")
    response = JSONResponse(status_code=429, content=_error_body(ErrorCode.RATE_LIMITED))
    # Retry-After / X-RateLimit-* headers, as slowapi's own handler adds them
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    code = ErrorCode.NOT_FOUND if exc.status_code == 404 else ErrorCode.HTTP_ERROR
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning(f"Invalid payload on {request.url.path}: {len(errors)} error(s)")
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") == "missing" and err.get("loc")]
    message = f"Missing required fields: {', '.join(missing)}" if missing else None
    detail = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]
    return JSONResponse(
        status_code=422, content=_error_body(ErrorCode.VALIDATION_ERROR, message, detail=detail)
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}", exc_info=exc)
    content = _error_body(ErrorCode.INTERNAL_ERROR)
    if not get_settings().is_production:
        content["details"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TourbookError, handle_tourbook_error)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
