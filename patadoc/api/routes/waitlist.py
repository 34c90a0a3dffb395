"""
Waitlist signup API.

POST /api/waitlist subscribes one email address to the pre-launch list.
Every outcome is one of the fixed status/code pairs; nothing from the
upstream provider reaches the client.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from patadoc.api.deps import (
    get_client_id,
    get_email_provider,
    get_rate_limiter,
    get_request_body,
    get_waitlist_config,
)
from patadoc.api.schemas import ErrorResponse, SignupResponse
from patadoc.components.rate_limit import RateLimiter
from patadoc.components.waitlist import (
    SignupInput,
    SignupOutput,
    WaitlistConfig,
    method_not_allowed,
    run,
    unexpected_error,
)
from patadoc.core.ports.email_provider import EmailProviderPort

logger = logging.getLogger(__name__)

router = APIRouter()


def to_response(out: SignupOutput, headers: dict[str, str] | None = None) -> JSONResponse:
    """Render a component outcome as a JSON response."""
    if out.success:
        body = SignupResponse(message=out.message).model_dump()
    else:
        body = ErrorResponse(error=out.message, code=out.code or "INTERNAL_ERROR").model_dump()
    return JSONResponse(status_code=out.status_code, content=body, headers=headers)


# --- Routes ---


@router.post(
    "/waitlist",
    response_model=SignupResponse,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def join_waitlist(
    body: bytes = Depends(get_request_body),
    client_id: str = Depends(get_client_id),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    provider: EmailProviderPort = Depends(get_email_provider),
    config: WaitlistConfig = Depends(get_waitlist_config),
) -> JSONResponse:
    """
    Add an email address to the waitlist.

    Body: {"email": "...", "source": "hero" | "footer_cta" | "unknown"}
    """
    try:
        out = run(
            SignupInput(client_id=client_id, body=body),
            rate_limiter=rate_limiter,
            provider=provider,
            config=config,
        )
    except Exception:
        logger.exception("Waitlist signup error")
        out = unexpected_error()

    return to_response(out)


@router.api_route(
    "/waitlist",
    methods=["GET", "HEAD", "PUT", "DELETE", "PATCH", "OPTIONS"],
    include_in_schema=False,
)
def waitlist_method_not_allowed() -> JSONResponse:
    return to_response(method_not_allowed(), headers={"Allow": "POST"})
