# telelead_intake/schemas/__init__.py
"""
Lead schema: field list, normalization rules and response models.
"""

from telelead_intake.schemas.lead import (
    FIELD_NAMES,
    LEAD_FIELDS,
    NORMALIZERS,
    REQUIRED_FIELDS,
    LeadAccepted,
    LeadSubmission,
)

__all__ = [
    "FIELD_NAMES",
    "LEAD_FIELDS",
    "NORMALIZERS",
    "REQUIRED_FIELDS",
    "LeadAccepted",
    "LeadSubmission",
]
