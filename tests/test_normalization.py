import pytest

from telelead_intake.core.exceptions import InvalidBodyError
from telelead_intake.schemas.lead import phone_digits, upper_code
from telelead_intake.services.intake import coerce_submission, normalize


def test_upper_code():
    assert upper_code("ca") == "CA"
    assert upper_code(" tx ") == "TX"
    assert upper_code("NY") == "NY"
    assert upper_code("") == ""


def test_phone_digits_strips_formatting():
    assert phone_digits("(555) 123-4567") == "5551234567"
    assert phone_digits("512-555-0123") == "5125550123"
    assert phone_digits("512.555.0123") == "5125550123"
    assert phone_digits("512 555 0123") == "5125550123"


def test_phone_digits_keeps_only_leading_plus():
    assert phone_digits("+1 (512) 555-0123") == "+15125550123"
    assert phone_digits("  +15125550123  ") == "+15125550123"
    assert phone_digits("1+512+555+0123") == "15125550123"
    assert phone_digits("++15125550123") == "+15125550123"


def test_phone_digits_without_digits():
    assert phone_digits("") == ""
    assert phone_digits("   ") == ""
    assert phone_digits("abc") == ""
    assert phone_digits("+") == "+"


def test_normalize_applies_rules_in_place():
    lead = {"state": "ca", "accident_state": "nv", "phone_number": "(555) 123-4567", "city": "austin"}
    result = normalize(lead)

    assert result is lead
    assert lead == {
        "state": "CA",
        "accident_state": "NV",
        "phone_number": "5551234567",
        "city": "austin",
    }


def test_normalize_skips_absent_fields():
    lead = {"first_name": "Jane"}
    assert normalize(lead) == {"first_name": "Jane"}


@pytest.mark.parametrize(
    "phone",
    ["(555) 123-4567", "+1 555 123 4567", "1+2+3", "++44 20 7946 0958", "  "],
)
def test_normalize_is_idempotent(phone):
    once = normalize({"state": " ca", "accident_state": "Tx", "phone_number": phone})
    twice = normalize(dict(once))
    assert once == twice


def test_coerce_submission_stringifies_scalars():
    lead = coerce_submission({"vehicle_year": 2019, "lost_wages": 12.5, "opt-in": True, "injured": False})
    assert lead == {"vehicle_year": "2019", "lost_wages": "12.5", "opt-in": "true", "injured": "false"}


def test_coerce_submission_drops_nulls():
    assert coerce_submission({"email": None, "city": "Austin"}) == {"city": "Austin"}


def test_coerce_submission_rejects_nested_values():
    with pytest.raises(InvalidBodyError) as exc_info:
        coerce_submission({"address": {"line1": "100 Congress"}})
    assert exc_info.value.details == {"field": "address"}


def test_coerce_submission_rejects_non_mapping():
    with pytest.raises(InvalidBodyError):
        coerce_submission(["not", "a", "map"])
