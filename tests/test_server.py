"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from archsim.server import create_app
from archsim.simulator import Simulator

GATEWAY_DESIGN = {
    "placedComponents": [{"id": "gw", "typeId": "api-gateway"}],
    "connections": [],
}


@pytest.fixture
def client(simulator: Simulator) -> TestClient:
    return TestClient(create_app(simulator))


class TestLookups:
    def test_catalog(self, client: TestClient) -> None:
        response = client.get("/api/catalog")

        assert response.status_code == 200
        types = response.json()
        assert len(types) == 19
        gateway = next(t for t in types if t["id"] == "api-gateway")
        assert gateway["name"] == "API Gateway"
        assert gateway["category"] == "edge"
        assert gateway["defaultParams"] == {"replicas": 2}

    def test_challenges(self, client: TestClient) -> None:
        challenges = client.get("/api/challenges").json()

        assert [c["id"] for c in challenges] == ["c1", "c2", "c3"]
        assert challenges[0]["sla"] == {"maxLatency": 200.0, "minAvailability": 0.999}
        assert challenges[0]["trafficProfile"]["rps"] == 15000

    def test_faults(self, client: TestClient) -> None:
        faults = client.get("/api/faults").json()

        assert len(faults) == 8
        az_down = next(f for f in faults if f["id"] == "az-down")
        assert az_down["effects"]["availabilityReduction"] == 0.3
        assert az_down["effects"]["costMultiplier"] is None

    def test_feedback_usage_without_provider(self, client: TestClient) -> None:
        assert client.get("/api/feedback/usage").json() == {
            "requests_used": 0,
            "requests_remaining": 0,
            "cache_size": 0,
        }


class TestSimulate:
    def test_simulate(self, client: TestClient) -> None:
        response = client.post(
            "/api/simulate",
            json={
                "challengeId": "c1",
                "design": GATEWAY_DESIGN,
                "traffic": {"rps": 1000},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["metrics"]["cost"] == pytest.approx(101.0)
        assert data["metrics"]["latency"]["p95"] == pytest.approx(9.0)
        assert data["is_supplementary_feedback_available"] is False
        assert data["supplementary_feedback"] is None
        assert data["fallback_feedback"]["source"] == "local"
        assert "Missing required component: CDN" in data["violations"]

    def test_active_faults(self, client: TestClient) -> None:
        design = {**GATEWAY_DESIGN, "activeFaultIds": ["network-partition"]}
        response = client.post(
            "/api/simulate",
            json={"challengeId": "c1", "design": design, "traffic": {"rps": 1000}},
        )

        data = response.json()
        assert data["metrics"]["latency"]["p95"] == pytest.approx(45.0)
        assert data["metrics"]["availability"] == pytest.approx(0.9999 * 0.5)

    def test_unknown_challenge(self, client: TestClient) -> None:
        response = client.post("/api/simulate", json={"challengeId": "c99"})
        assert response.status_code == 404

    def test_unknown_fault(self, client: TestClient) -> None:
        design = {**GATEWAY_DESIGN, "activeFaultIds": ["meteor-strike"]}
        response = client.post("/api/simulate", json={"challengeId": "c1", "design": design})
        assert response.status_code == 404
        assert "meteor-strike" in response.json()["detail"]

    def test_malformed_request(self, client: TestClient) -> None:
        response = client.post("/api/simulate", json={"design": GATEWAY_DESIGN})
        assert response.status_code == 422

    def test_empty_design(self, client: TestClient) -> None:
        data = client.post("/api/simulate", json={"challengeId": "c2"}).json()
        assert data["score"] == 0
        assert data["violations"] == ["No components placed in the system"]

    @pytest.mark.parametrize("replicas", ["two", None, True, [3]])
    def test_non_numeric_param(self, client: TestClient, replicas: object) -> None:
        design = {
            "placedComponents": [
                {"id": "gw", "typeId": "api-gateway", "params": {"replicas": replicas}}
            ]
        }
        response = client.post(
            "/api/simulate",
            json={"challengeId": "c1", "design": design, "traffic": {"rps": 1000}},
        )

        assert response.status_code == 200
        assert response.json()["metrics"]["cost"] == pytest.approx(101.0)


class TestValidate:
    def test_valid(self, client: TestClient) -> None:
        response = client.post("/api/validate", json=GATEWAY_DESIGN)
        assert response.json() == {"ok": True, "warnings": []}

    def test_unknown_type(self, client: TestClient) -> None:
        design = {"placedComponents": [{"id": "x", "typeId": "mystery"}]}
        report = client.post("/api/validate", json=design).json()

        assert report["ok"] is False
        assert report["warnings"] == ["component x has unknown type mystery"]

    def test_non_numeric_param(self, client: TestClient) -> None:
        design = {
            "placedComponents": [
                {"id": "gw", "typeId": "api-gateway", "params": {"replicas": "two"}}
            ]
        }
        report = client.post("/api/validate", json=design).json()

        assert report["ok"] is False
        assert report["warnings"] == [
            "component gw param replicas='two' is not a number, using default 2"
        ]
