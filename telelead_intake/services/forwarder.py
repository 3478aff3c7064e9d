from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp

from telelead_intake.core.logging import get_structlog_logger
from telelead_intake.schemas.lead import CREDENTIAL_PARAMS

logger = get_structlog_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class Credentials:
    key: str
    uid: str

    def as_params(self) -> Dict[str, str]:
        return {"key": self.key, "uid": self.uid}

    def __repr__(self) -> str:
        return "Credentials(key='***', uid='***')"


@dataclass(frozen=True)
class ForwardSuccess:
    status_code: int
    payload: Any
    sent_params: Dict[str, str] = field(repr=False)

    ok = True


@dataclass(frozen=True)
class ForwardFailure:
    kind: str  # "http_status" | "timeout" | "transport"
    error: str
    detail: Any = None
    status_code: Optional[int] = None

    ok = False


ForwardResult = Union[ForwardSuccess, ForwardFailure]


def build_params(lead: Mapping[str, str], credentials: Credentials) -> Dict[str, str]:
    """Query parameters for the upstream call; credentials always win."""
    params = {k: v for k, v in lead.items() if k not in CREDENTIAL_PARAMS}
    params.update(credentials.as_params())
    return params


def public_params(params: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in params.items() if k not in CREDENTIAL_PARAMS}


async def _read_payload(response: aiohttp.ClientResponse) -> Any:
    text = await response.text()
    if response.content_type == "application/json":
        try:
            return json.loads(text)
        except ValueError:
            pass
    return text.strip()


async def forward(
    lead: Mapping[str, str],
    credentials: Credentials,
    *,
    endpoint: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    session: Optional[aiohttp.ClientSession] = None,
) -> ForwardResult:
    """
    Relay a validated lead to TeleLead with a single GET request.

    The upstream body is passed back uninterpreted (trimmed text, or decoded
    JSON). Every failure resolves to a ``ForwardFailure``; nothing raises.
    """
    params = build_params(lead, credentials)
    log = logger.bind(endpoint=endpoint, field_count=len(params) - len(CREDENTIAL_PARAMS))

    owns_session = session is None
    if owns_session:
        session = aiohttp.ClientSession()

    try:
        log.info("telelead.forward.started")
        async with session.get(
            endpoint,
            params=params,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            status = response.status
            payload = await _read_payload(response)

        if 200 <= status < 300:
            log.info("telelead.forward.succeeded", status_code=status)
            return ForwardSuccess(status_code=status, payload=payload, sent_params=params)

        log.warning("telelead.forward.failed", kind="http_status", status_code=status)
        return ForwardFailure(
            kind="http_status",
            error=f"HTTP {status}",
            detail=payload,
            status_code=status,
        )
    except asyncio.TimeoutError:
        log.warning("telelead.forward.failed", kind="timeout", timeout_seconds=timeout)
        return ForwardFailure(
            kind="timeout",
            error="Request timeout",
            detail=f"No response from upstream within {timeout:g} seconds",
        )
    except aiohttp.ClientError as e:
        log.warning("telelead.forward.failed", kind="transport", error=str(e))
        return ForwardFailure(kind="transport", error="Client error", detail=str(e) or type(e).__name__)
    except Exception as e:
        log.exception("telelead.forward.unexpected_error", error_type=type(e).__name__)
        return ForwardFailure(kind="transport", error="Unexpected error", detail=str(e) or type(e).__name__)
    finally:
        if owns_session:
            await session.close()


class TeleleadForwarder:
    """Forwarder bound to one endpoint and credential pair."""

    def __init__(self, credentials: Credentials, endpoint: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.credentials = credentials
        self.endpoint = endpoint
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "TeleleadForwarder":
        return cls(
            credentials=Credentials(key=settings.telelead_key, uid=settings.telelead_uid),
            endpoint=settings.telelead_url,
            timeout=settings.telelead_timeout_seconds,
        )

    async def __call__(self, lead: Mapping[str, str]) -> ForwardResult:
        return await forward(
            lead,
            self.credentials,
            endpoint=self.endpoint,
            timeout=self.timeout,
        )
