import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from patadoc.api.deps import get_email_provider, get_settings, reset_singletons
from patadoc.api.schemas import ErrorResponse
from patadoc.components.waitlist import unexpected_error
from patadoc.core.ports.email_provider import ProviderConfigError
from patadoc.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    # Missing credentials do not stop the app; signups answer EMAIL_SERVICE_ERROR
    provider = get_email_provider(rules)
    try:
        check = getattr(provider, "check_config", None)
        if check is not None:
            check()
        logger.info("Email provider: %s", provider.name)
    except ProviderConfigError as e:
        logger.warning("Email provider %s misconfigured: %s", provider.name, e)

    yield

    # Shutdown: close the provider's HTTP client
    reset_singletons()


app = FastAPI(
    title="PataDoc Waitlist API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from patadoc.api.routes import waitlist  # noqa: E402

app.include_router(waitlist.router, prefix="/api", tags=["Waitlist"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["POST"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    out = unexpected_error()
    return JSONResponse(
        status_code=out.status_code,
        content=ErrorResponse(error=out.message, code=out.code or "INTERNAL_ERROR").model_dump(),
    )


@app.get("/health")
def health_check() -> dict[str, Any]:
    return {"status": "ok", "service": "waitlist"}
