"""
FastAPI app assembly: middleware, exception handlers and router wiring.
"""
import logging
import os
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

from campus_connect import __version__
from campus_connect.api.auth import router as auth_router
from campus_connect.api.errors import register_exception_handlers, unhandled_exception_handler
from campus_connect.api.events import router as events_router
from campus_connect.api.mentorship import router as mentorship_router
from campus_connect.api.questions import router as questions_router
from campus_connect.api.tags import router as tags_router
from campus_connect.db.database import ping
from campus_connect.utils.rate_limit import FixedWindowRateLimiter
from campus_connect.utils.settings import get_app_settings, get_auth_settings, get_rate_limit_settings

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Refuse to serve without a signing secret
    get_auth_settings()
    logger.info("app_startup: version=%s log_level=%s env=%s", __version__, LOG_LEVEL_NAME, get_app_settings().environment)
    yield


app = FastAPI(
    title="Campus Connect API",
    description="Q&A forum, mentorship matching and event registration for a campus community.",
    version=__version__,
    lifespan=lifespan,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_app_settings().cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@lru_cache(maxsize=None)
def get_rate_limiter() -> FixedWindowRateLimiter:
    settings = get_rate_limit_settings()
    return FixedWindowRateLimiter(settings.max_requests, settings.window.total_seconds())


def reset_rate_limiter() -> None:
    """Drop the limiter so the next request rebuilds it from current settings."""
    get_rate_limiter.cache_clear()


# Middleware: fixed-window limit per client address on API routes
@app.middleware("http")
async def rate_limit_api(request: Request, call_next):
    if request.url.path.startswith("/api/") and get_rate_limit_settings().enabled:
        client = request.client.host if request.client else "unknown"
        allowed, retry_after = get_rate_limiter().hit(client)
        if not allowed:
            logger.warning("rate_limited client=%s path=%s", client, request.url.path)
            return JSONResponse(
                {"error": "Too many requests, please try again later."},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )
    return await call_next(request)


# Middleware: security headers on every response, errors included
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    try:
        response = await call_next(request)
    except Exception as exc:
        response = await unhandled_exception_handler(request, exc)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


router = APIRouter()


@router.get("/health")
def health_check():
    try:
        ping()
    except Exception as exc:
        logger.error("health_check_failed: %s", exc)
        return JSONResponse(
            {
                "status": "ERROR",
                "message": "Campus Connect API is running but database is not connected",
                "database": "disconnected",
                "error": str(exc),
            },
            status_code=503,
        )
    return {
        "status": "OK",
        "message": "Campus Connect API is running",
        "database": "connected",
    }


app.include_router(router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(questions_router, prefix="/api")
app.include_router(tags_router, prefix="/api")
app.include_router(mentorship_router, prefix="/api")
app.include_router(events_router, prefix="/api")
