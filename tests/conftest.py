from __future__ import annotations

from typing import Dict, List, Mapping, Optional

import pytest
import pytest_asyncio
from aiohttp import test_utils, web
from fastapi.testclient import TestClient

from telelead_intake.core.config import Settings
from telelead_intake.main import create_app
from telelead_intake.schemas.lead import FIELD_NAMES
from telelead_intake.services.forwarder import (
    Credentials,
    ForwardFailure,
    ForwardResult,
    ForwardSuccess,
    build_params,
)

TEST_CREDENTIALS = Credentials(key="test-key", uid="test-uid")

SAMPLE_VALUES = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane.doe@example.com",
    "phone_number": "5125550123",
    "dob": "1985-04-12",
    "gender": "Female",
    "address": "100 Congress Ave",
    "city": "Austin",
    "state": "TX",
    "zip_code": "78701",
    "ip_address": "203.0.113.7",
    "accident_date": "2024-05-01",
    "accident_state": "TX",
    "accident_type": "Auto",
    "accident_description": "Rear-ended at a red light",
    "at_fault": "No",
    "injured": "Yes",
    "injury_type": "Neck",
    "medical_treatment": "Yes",
    "treatment_within_days": "3",
    "hospitalized": "No",
    "police_report": "Yes",
    "police_report_number": "APD-2024-1234",
    "has_attorney": "No",
    "insurance_company": "Acme Mutual",
    "has_insurance": "Yes",
    "other_party_insured": "Yes",
    "other_party_insurance_company": "Other Mutual",
    "vehicle_year": "2019",
    "vehicle_make": "Toyota",
    "vehicle_model": "Camry",
    "missed_work": "Yes",
    "lost_wages": "1200",
    "opt-in": "Yes",
    "tcpa_consent_text": "I agree to be contacted.",
    "trusted_form_cert_url": "https://cert.trustedform.com/abc123",
    "jornaya_leadid": "LEADID-0001",
    "origninal_lead_submit_date": "2024-05-02",
    "source_url": "https://forms.example.com/accident",
    "user_agent": "Mozilla/5.0",
    "comments": "Prefers evening calls",
}


def make_lead(**overrides) -> Dict[str, str]:
    """A submission with every field filled in; ``None`` removes a field."""
    lead = {name: SAMPLE_VALUES[name] for name in FIELD_NAMES}
    for key, value in overrides.items():
        if value is None:
            lead.pop(key, None)
        else:
            lead[key] = value
    return lead


def make_settings(**overrides) -> Settings:
    values = {
        "TELELEAD_KEY": TEST_CREDENTIALS.key,
        "TELELEAD_UID": TEST_CREDENTIALS.uid,
        "TELELEAD_URL": "http://telelead.invalid/lead_post",
        "ENVIRONMENT": "testing",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeForwarder:
    """Records forwarded leads and answers with a canned result."""

    def __init__(self, result: Optional[ForwardResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[Dict[str, str]] = []

    async def __call__(self, lead: Mapping[str, str]) -> ForwardResult:
        self.calls.append(dict(lead))
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return ForwardSuccess(
            status_code=200,
            payload="Success",
            sent_params=build_params(lead, TEST_CREDENTIALS),
        )


@pytest.fixture
def lead() -> Dict[str, str]:
    return make_lead()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def forwarder() -> FakeForwarder:
    return FakeForwarder()


@pytest.fixture
def client(settings, forwarder) -> TestClient:
    app = create_app(settings, forwarder=forwarder)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def failing_client(settings) -> TestClient:
    forwarder = FakeForwarder(
        result=ForwardFailure(kind="http_status", error="HTTP 500", detail="Failure: server down", status_code=500)
    )
    app = create_app(settings, forwarder=forwarder)
    return TestClient(app, raise_server_exceptions=False)


@pytest_asyncio.fixture
async def upstream():
    """Start throwaway TeleLead stand-ins backed by aiohttp handlers."""
    servers = []

    async def _start(handler, path: str = "/lead_post") -> str:
        app = web.Application()
        app.router.add_get(path, handler)
        server = test_utils.TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url(path))

    yield _start

    for server in servers:
        await server.close()
