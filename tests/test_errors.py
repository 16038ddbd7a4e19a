from httpx import ASGITransport, AsyncClient

from agentlens.database import get_db
from agentlens.main import app
from agentlens.services.run_service import run_service
from conftest import SESSION_HEADER


async def test_unexpected_error_keeps_cors_headers(session_factory, seed_session, monkeypatch):
    session_id = await seed_session()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def failing_list_runs(db, session):
        raise RuntimeError("db down")

    monkeypatch.setattr(run_service, "list_runs", failing_list_runs)
    app.dependency_overrides[get_db] = override_get_db
    # ServerErrorMiddleware re-raises after replying; keep the reply instead
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get(
                "/api/agent-runs",
                headers={SESSION_HEADER: session_id, "Origin": "http://site.example"},
            )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "db down"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert "x-demo-session" in response.headers["access-control-allow-headers"]


async def test_domain_errors_keep_cors_headers(client):
    response = await client.get("/api/agent-runs", headers={"Origin": "http://site.example"})
    assert response.status_code == 401
    assert response.json() == {"error": "Missing X-Demo-Session header"}
    assert response.headers["access-control-allow-origin"] == "*"
