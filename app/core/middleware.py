import json
import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from app.core.config import settings
from app.core.logging import get_logger
from app.core.rate_limit import build_rate_limiter, extract_client_ip
from app.errors import RateLimitExceeded, error_response


logger = get_logger("middleware")

RATE_LIMIT_EXEMPT_PATHS = ("/health", "/metrics", "/docs", "/redoc", "/openapi.json")

RESET_COLOR = "\033[0m"
STATUS_COLORS = {2: "\033[92m", 4: "\033[93m", 5: "\033[91m"}


def get_status_color(status_code: int) -> str:
    return STATUS_COLORS.get(status_code // 100, RESET_COLOR)


def is_rate_limited_path(path: str) -> bool:
    if not path.startswith(settings.API_PREFIX):
        return False
    return not path.removeprefix(settings.API_PREFIX).startswith(RATE_LIMIT_EXEMPT_PATHS)


async def _error_reason(response: Response) -> tuple[Response, str]:
    """Drain an error response to log its message, returning a replayable copy."""
    body = b""
    async for chunk in response.body_iterator:
        body += chunk
    replay = Response(
        content=body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    try:
        reason = json.loads(body.decode()).get("error", "")
    except (ValueError, AttributeError):
        reason = body.decode(errors="ignore")
    return replay, reason


def register_middleware(app: FastAPI):

    app.state.rate_limiter = build_rate_limiter(settings)

    @app.middleware("http")
    async def rate_limit_requests(request: Request, call_next):
        if (
            not settings.RATE_LIMIT_ENABLED
            or request.method == "OPTIONS"
            or not is_rate_limited_path(request.url.path)
        ):
            return await call_next(request)

        result = await request.app.state.rate_limiter.hit(extract_client_ip(request))
        if not result.allowed:
            logger.warning(f"Rate limit exceeded for {result.key} on {request.method} {request.url.path}")
            exc = RateLimitExceeded(retry_after=result.retry_after)
            return error_response(
                status.HTTP_429_TOO_MANY_REQUESTS,
                exc.message,
                headers={"Retry-After": str(exc.retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(result.reset_at)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Unhandled error for {request.method} {request.url.path}")
            raise
        elapsed = time.perf_counter() - started

        client = f"{request.client.host}:{request.client.port}" if request.client else "unknown"
        color = get_status_color(response.status_code)
        line = (
            f"{client} - {request.method} {request.url.path} - "
            f"Status: {color}{response.status_code}{RESET_COLOR} - Time: {elapsed:.3f}s"
        )

        if response.status_code >= 400:
            response, reason = await _error_reason(response)
            line += f" - Reason: {reason}"

        logger.info(line)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=True,
    )
