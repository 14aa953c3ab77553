from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.http_server import app, get_advisory_provider, get_db
from engine.advisory import FAILURE_MESSAGE, AdvisoryProvider
from models.base import Base


class StubProvider(AdvisoryProvider):
    async def generate_advisory(self, snapshot):
        return f"oil at {snapshot['oilPrice']}"


class FailingProvider(AdvisoryProvider):
    async def generate_advisory(self, snapshot):
        raise ConnectionError("down")


def _client(provider=None):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    def override_get_db():
        try:
            yield session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_advisory_provider] = lambda: provider or StubProvider()
    return TestClient(app)


def test_health():
    assert _client().get("/health").json() == {"status": "ok"}


def test_http_simulation_flow():
    client = _client()

    variables = client.get("/v1/variables").json()
    assert variables["status"] == "ok"
    assert len(variables["data"]["variables"]) == 8

    scenarios = client.get("/v1/scenarios").json()
    assert "export_boom" in [s["id"] for s in scenarios["data"]["scenarios"]]

    sim = client.post(
        "/v1/simulations",
        json={"inputs": {"interestRate": 1}, "caller_identity": "http-test"},
    )
    payload = sim.json()
    assert sim.status_code == 200
    assert payload["status"] == "ok"
    assert payload["data"]["nodes"]["bond"] == -1.0
    assert payload["model_version"]
    assert payload["audit_id"]

    preset = client.post("/v1/scenarios/high_interest/simulation", params={"caller_identity": "http-test"})
    assert preset.json()["data"]["nodes"]["interest"] > 1.0

    graph = client.post("/v1/graph", json={"inputs": {"oilPrice": 20}})
    assert graph.json()["data"]["feedback_edges"] == [{"source": "price", "target": "interest"}]

    advisory = client.post("/v1/advisories", json={"inputs": {"oilPrice": 15}})
    assert advisory.json()["data"]["advisory"] == "oil at 15.0"

    log = client.post("/v1/audit-log", json={"operation": "simulate", "limit": 10})
    records = log.json()["records"]
    assert log.json()["status"] == "ok"
    assert any(r["caller_identity"] == "http-test" for r in records)


def test_empty_simulation_body_is_equilibrium():
    payload = _client().post("/v1/simulations", json={}).json()
    assert payload["status"] == "ok"
    assert len(payload["data"]["insights"]) == 1


def test_unknown_scenario_is_error_envelope():
    resp = _client().post("/v1/scenarios/nope/simulation")
    payload = resp.json()
    assert resp.status_code == 200
    assert payload["status"] == "error"
    assert payload["audit_id"]


def test_advisory_failure_is_placeholder():
    resp = _client(FailingProvider()).post("/v1/advisories", json={"inputs": {}})
    assert resp.status_code == 200
    assert resp.json()["data"]["advisory"] == FAILURE_MESSAGE


def test_get_graph_returns_static_layout():
    resp = _client().get("/v1/graph")
    payload = resp.json()

    assert resp.status_code == 200
    assert payload["status"] == "ok"
    assert len(payload["data"]["nodes"]) == 10
    assert all(n["impact"] == "neutral" and n["score"] == 0.0 for n in payload["data"]["nodes"])
    assert all(e["activity"] == "idle" for e in payload["data"]["edges"])
    assert sorted(payload["data"]["evaluation_order"]) == sorted(n["id"] for n in payload["data"]["nodes"])
    assert payload["data"]["feedback_edges"] == [{"source": "price", "target": "interest"}]


def test_audit_log_filters_by_scenario_and_insight_count():
    client = _client()
    client.post("/v1/scenarios/export_boom/simulation")
    client.post("/v1/scenarios/high_interest/simulation")
    client.post("/v1/simulations", json={})

    by_scenario = client.post("/v1/audit-log", json={"scenario_id": "high_interest"}).json()["records"]
    assert [r["scenario_id"] for r in by_scenario] == ["high_interest"]
    assert by_scenario[0]["insight_count"] == 2

    eventful = client.post("/v1/audit-log", json={"min_insight_count": 2}).json()["records"]
    assert [r["scenario_id"] for r in eventful] == ["high_interest"]
