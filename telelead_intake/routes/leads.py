# telelead_intake/routes/leads.py
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Mapping

from fastapi import APIRouter, Body, Depends, Request, status

from telelead_intake.core.config import Settings
from telelead_intake.core.exceptions import (
    InvalidPhoneError,
    MissingFieldsError,
    UpstreamError,
    ValidationError,
)
from telelead_intake.core.logging import get_structlog_logger
from telelead_intake.schemas.lead import LeadAccepted
from telelead_intake.services.forwarder import ForwardFailure, ForwardResult, public_params
from telelead_intake.services.intake import coerce_submission, normalize_and_validate

logger = get_structlog_logger(__name__)

router = APIRouter(tags=["leads"])

Forwarder = Callable[[Mapping[str, str]], Awaitable[ForwardResult]]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_forwarder(request: Request) -> Forwarder:
    return request.app.state.forwarder


def resolve_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """Caller's network address, optionally taken from the first proxy hop."""
    if trust_proxy_headers:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
    return request.client.host if request.client else "unknown"


def rejection_log_fields(error: ValidationError) -> Dict[str, Any]:
    """Loggable parts of a rejection; submitted values stay out of the log."""
    if isinstance(error, MissingFieldsError):
        return {"missing": error.missing}
    if isinstance(error, InvalidPhoneError):
        return {"field": "phone_number"}
    return {"field": error.details.get("field")}


@router.post(
    "/lead",
    response_model=LeadAccepted,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Validate a lead and forward it to TeleLead",
)
async def submit_lead(
    request: Request,
    body: Dict[str, Any] = Body(...),
    settings: Settings = Depends(get_app_settings),
    forwarder: Forwarder = Depends(get_forwarder),
) -> LeadAccepted:
    log = logger.bind(route="/api/lead", action="submit")

    client_ip = resolve_client_ip(request, settings.trust_proxy_headers)
    try:
        lead = normalize_and_validate(coerce_submission(body), client_ip)
    except ValidationError as e:
        log.warning("lead.rejected", reason=e.message, client_ip=client_ip, **rejection_log_fields(e))
        raise

    log.info("lead.received", client_ip=client_ip, field_count=len(lead))

    result = await forwarder(lead)
    if isinstance(result, ForwardFailure):
        log.warning(
            "lead.forward_failed",
            kind=result.kind,
            upstream_status=result.status_code,
        )
        raise UpstreamError(detail=result.detail or result.error)

    log.info("lead.forwarded", upstream_status=result.status_code)
    return LeadAccepted(
        telelead_status=result.status_code,
        telelead_raw=result.payload,
        sent_data=public_params(result.sent_params) if settings.echo_sent_data else None,
    )
