# telelead_intake/schemas/lead.py
"""
Lead submission schema.

The field list is the contract with the TeleLead endpoint: names are sent
verbatim as query parameters, including the upstream's own spellings
(``origninal_lead_submit_date``, ``opt-in``).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, Field

LeadSubmission = Dict[str, str]


@dataclass(frozen=True)
class LeadField:
    name: str
    required: bool = True
    normalizer: Optional[Callable[[str], str]] = None


_NON_DIGIT = re.compile(r"\D+")
PHONE_PATTERN = re.compile(r"^\+?\d{10,15}$")


def upper_code(value: str) -> str:
    return value.strip().upper()


def phone_digits(value: str) -> str:
    """Keep digits and a single leading ``+``."""
    value = value.strip()
    prefix = "+" if value.startswith("+") else ""
    return prefix + _NON_DIGIT.sub("", value)


LEAD_FIELDS: Tuple[LeadField, ...] = (
    # Identity / contact
    LeadField("first_name"),
    LeadField("last_name"),
    LeadField("email"),
    LeadField("phone_number", normalizer=phone_digits),
    LeadField("dob"),
    LeadField("gender"),
    # Address
    LeadField("address"),
    LeadField("city"),
    LeadField("state", normalizer=upper_code),
    LeadField("zip_code"),
    LeadField("ip_address"),
    # Accident
    LeadField("accident_date"),
    LeadField("accident_state", normalizer=upper_code),
    LeadField("accident_type"),
    LeadField("accident_description"),
    LeadField("at_fault"),
    LeadField("injured"),
    LeadField("injury_type"),
    LeadField("medical_treatment"),
    LeadField("treatment_within_days"),
    LeadField("hospitalized"),
    LeadField("police_report"),
    LeadField("police_report_number"),
    # Representation / insurance
    LeadField("has_attorney"),
    LeadField("insurance_company"),
    LeadField("has_insurance"),
    LeadField("other_party_insured"),
    LeadField("other_party_insurance_company"),
    LeadField("vehicle_year"),
    LeadField("vehicle_make"),
    LeadField("vehicle_model"),
    LeadField("missed_work"),
    LeadField("lost_wages"),
    # Consent / tracking
    LeadField("opt-in"),
    LeadField("tcpa_consent_text"),
    LeadField("trusted_form_cert_url"),
    LeadField("jornaya_leadid"),
    # Metadata
    LeadField("origninal_lead_submit_date"),
    LeadField("source_url"),
    LeadField("user_agent"),
    LeadField("comments"),
)

FIELD_NAMES: Tuple[str, ...] = tuple(f.name for f in LEAD_FIELDS)
REQUIRED_FIELDS: Tuple[str, ...] = tuple(f.name for f in LEAD_FIELDS if f.required)
NORMALIZERS: Dict[str, Callable[[str], str]] = {
    f.name: f.normalizer for f in LEAD_FIELDS if f.normalizer is not None
}

# Never taken from a submission; always supplied from configuration.
CREDENTIAL_PARAMS: Tuple[str, ...] = ("key", "uid")


class LeadAccepted(BaseModel):
    ok: bool = True
    message: str = "Lead submitted successfully."
    telelead_status: int
    telelead_raw: Any = None
    sent_data: Optional[Dict[str, str]] = Field(default=None)
