from datetime import datetime, timezone

import pytest

from agentlens.models import DemoSession
from conftest import DEMO_VISITOR, parse_ts


async def test_demo_access_issues_future_expiry(client):
    response = await client.post("/api/demo-access", json={**DEMO_VISITOR, "evaluation_notes": "Evaluating for Q3"})
    assert response.status_code == 200
    body = response.json()
    assert body["demo_session_id"]
    assert parse_ts(body["expires_at"]) > datetime.now(timezone.utc)
    assert "48 hours" in body["message"]


async def test_demo_access_accepts_notes_alias(client, session_factory):
    response = await client.post("/api/demo-access", json={**DEMO_VISITOR, "notes": "short eval"})
    assert response.status_code == 200

    async with session_factory() as session:
        demo = await session.get(DemoSession, response.json()["demo_session_id"])
    assert demo.evaluation_notes == "short eval"
    assert demo.run_count == 0


@pytest.mark.parametrize("missing", ["name", "email", "company", "role"])
async def test_demo_access_requires_all_identity_fields(client, missing):
    payload = {k: v for k, v in DEMO_VISITOR.items() if k != missing}
    response = await client.post("/api/demo-access", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: name, email, company, role"}


async def test_demo_access_rejects_blank_fields(client):
    response = await client.post("/api/demo-access", json={**DEMO_VISITOR, "company": "   "})
    assert response.status_code == 400


async def test_options_preflight_reply(client):
    response = await client.options("/api/demo-access")
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "x-demo-session" in response.headers["access-control-allow-headers"]


async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
