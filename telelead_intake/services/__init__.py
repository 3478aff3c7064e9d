# telelead_intake/services/__init__.py
"""
Intake pipeline: validation/normalization, then forwarding to TeleLead.
"""

from telelead_intake.services.forwarder import (
    Credentials,
    ForwardFailure,
    ForwardResult,
    ForwardSuccess,
    TeleleadForwarder,
    forward,
)
from telelead_intake.services.intake import (
    coerce_submission,
    normalize,
    normalize_and_validate,
)

__all__ = [
    # Forwarding
    "Credentials",
    "ForwardFailure",
    "ForwardResult",
    "ForwardSuccess",
    "TeleleadForwarder",
    "forward",
    # Intake
    "coerce_submission",
    "normalize",
    "normalize_and_validate",
]
