"""Normalization and validation of incoming lead submissions."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from telelead_intake.core.exceptions import (
    InvalidBodyError,
    InvalidPhoneError,
    MissingFieldsError,
)
from telelead_intake.schemas.lead import (
    NORMALIZERS,
    PHONE_PATTERN,
    REQUIRED_FIELDS,
    LeadSubmission,
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def coerce_submission(body: Any) -> LeadSubmission:
    """Turn a decoded JSON body into a flat string map."""
    if not isinstance(body, Mapping):
        raise InvalidBodyError()

    lead: LeadSubmission = {}
    for key, value in body.items():
        if value is None:
            continue
        if isinstance(value, bool):
            lead[key] = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            lead[key] = str(value)
        else:
            raise InvalidBodyError(details={"field": key})
    return lead


def normalize(lead: LeadSubmission) -> LeadSubmission:
    """Apply per-field normalizers in place. Idempotent."""
    for name, normalizer in NORMALIZERS.items():
        value = lead.get(name)
        if value is not None:
            lead[name] = normalizer(value)
    return lead


def missing_fields(lead: Mapping[str, str]) -> List[str]:
    return [name for name in REQUIRED_FIELDS if _is_blank(lead.get(name))]


def normalize_and_validate(raw: LeadSubmission, client_ip: str) -> LeadSubmission:
    """
    Prepare a submission for forwarding.

    Fills ``ip_address`` from ``client_ip`` when blank, normalizes state
    codes and the phone number, then checks the phone format (fail-fast)
    and the mandatory fields (all gaps reported at once).
    """
    if _is_blank(raw.get("ip_address")):
        raw["ip_address"] = client_ip

    received_phone = raw.get("phone_number")
    normalize(raw)

    phone = raw.get("phone_number")
    if not _is_blank(received_phone) and not PHONE_PATTERN.match(phone):
        raise InvalidPhoneError(received=received_phone)

    missing = missing_fields(raw)
    if missing:
        raise MissingFieldsError(missing)

    return raw
