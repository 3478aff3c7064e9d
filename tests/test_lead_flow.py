"""Full pipeline: ASGI app -> real forwarder -> local aiohttp upstream."""
import asyncio

import pytest
from aiohttp import web
from httpx import ASGITransport, AsyncClient

from telelead_intake.main import create_app

from tests.conftest import make_lead, make_settings


async def _post_lead(app, payload):
    transport = ASGITransport(app=app, client=("198.51.100.9", 40000))
    async with AsyncClient(transport=transport, base_url="http://intake.test") as client:
        return await client.post("/api/lead", json=payload)


@pytest.mark.asyncio
async def test_lead_is_normalized_and_forwarded(upstream):
    calls = []

    async def handler(request):
        calls.append(dict(request.query))
        return web.Response(text="Success\n")

    url = await upstream(handler)
    app = create_app(make_settings(TELELEAD_URL=url))

    payload = make_lead(phone_number="(555) 123-4567", state="ca", ip_address="")
    payload["key"] = "attacker-key"
    response = await _post_lead(app, payload)

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["telelead_status"] == 200
    assert body["telelead_raw"] == "Success"

    assert len(calls) == 1
    sent = calls[0]
    assert sent["phone_number"] == "5551234567"
    assert sent["state"] == "CA"
    assert sent["ip_address"] == "198.51.100.9"
    assert sent["key"] == "test-key"
    assert sent["uid"] == "test-uid"


@pytest.mark.asyncio
async def test_upstream_error_becomes_502(upstream):
    async def handler(request):
        return web.Response(text="Failure: upstream exploded", status=500)

    url = await upstream(handler)
    app = create_app(make_settings(TELELEAD_URL=url))

    response = await _post_lead(app, make_lead())

    assert response.status_code == 502
    assert response.json() == {
        "ok": False,
        "error": "Upstream request failed",
        "detail": "Failure: upstream exploded",
    }


@pytest.mark.asyncio
async def test_upstream_timeout_becomes_502(upstream):
    async def handler(request):
        await asyncio.sleep(0.5)
        return web.Response(text="Success")

    url = await upstream(handler)
    app = create_app(make_settings(TELELEAD_URL=url, TELELEAD_TIMEOUT_SECONDS="0.05"))

    response = await _post_lead(app, make_lead())

    assert response.status_code == 502
    assert response.json()["ok"] is False


@pytest.mark.asyncio
async def test_rejected_lead_never_reaches_upstream(upstream):
    calls = []

    async def handler(request):
        calls.append(dict(request.query))
        return web.Response(text="Success")

    url = await upstream(handler)
    app = create_app(make_settings(TELELEAD_URL=url))

    response = await _post_lead(app, make_lead(email=None, dob=None))

    assert response.status_code == 400
    assert response.json()["missing"] == ["email", "dob"]
    assert calls == []
