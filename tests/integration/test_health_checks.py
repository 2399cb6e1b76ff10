"""
Integration tests for health checks

Verifica los endpoints de health check:
- /health - Health check básico
- /health/live - Liveness probe para Kubernetes
- /health/ready - Readiness probe (store y scheduler)
"""

import pytest
from fastapi.testclient import TestClient

from rental_engine.main import app


@pytest.fixture
def client():
    # Sin context manager: el lifespan (worker, semilla) no se ejecuta
    return TestClient(app)


class TestHealthChecks:
    def test_basic_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "rental-engine"}

    def test_liveness_probe(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_probe_in_memory(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["store"] == "in_memory"
        assert data["checks"]["scheduler"] == "stopped"


class TestStartup:
    def test_lifespan_seeds_fleet_and_starts_scheduler(self):
        with TestClient(app) as client:
            ready = client.get("/health/ready").json()
            response = client.get("/api/v1/vehicles")

        assert ready["checks"]["scheduler"] == "running"
        assert response.status_code == 200
        vehicle_ids = {vehicle["id"] for vehicle in response.json()["data"]}
        assert {"veh-001", "veh-002", "veh-003", "veh-004"} <= vehicle_ids
