"""Tests for the dashboard API."""

import pytest
from fastapi.testclient import TestClient

from replicaset_monitor.config import Config
from replicaset_monitor.dashboard import create_app
from replicaset_monitor.sources import BaseSource, SourceError


class StaticSource(BaseSource):
    def __init__(self, payload):
        self.payload = payload

    def fetch(self):
        return self.payload


class FailingSource(BaseSource):
    def fetch(self):
        raise SourceError("Payload file not found: /nowhere.json")


class TestDashboard:
    """Tests for dashboard endpoints."""

    @pytest.fixture
    def client(self, payload):
        return TestClient(create_app(Config(), source=StaticSource(payload)))

    def test_healthcheck(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "critical"
        assert data["summary"]["total"] == 7
        assert set(data["engines"]) == {"mongodb", "postgresql", "mssql"}

    def test_summary_before_and_after_check(self, client):
        assert client.get("/api/health/summary").json()["status"] == "unknown"
        client.get("/api/health")
        assert client.get("/api/health/summary").json()["nodes"]["critical"] == 2

    def test_clusters(self, client):
        response = client.get("/api/clusters/PostgreSQL")
        assert response.status_code == 200
        data = response.json()
        assert data["engine"] == "postgresql"
        assert data["clusters"][0]["cluster_id"] == "pg-main"
        assert data["clusters"][0]["nodes"][0]["hostname"] == "pg-2"

    def test_clusters_unknown_engine(self, client):
        assert client.get("/api/clusters/oracle").status_code == 400

    def test_topology(self, client):
        response = client.get("/api/topology/mongodb/rs0")
        assert response.status_code == 200
        data = response.json()
        assert data["engine"] == "mongodb"
        assert data["nodes"][0] == {
            "id": "mongo-1",
            "role": "primary",
            "x": 400.0,
            "y": 250.0,
            "payload": data["nodes"][0]["payload"],
        }
        assert {e["id"] for e in data["edges"]} == {"mongo-1->mongo-2", "mongo-1->mongo-3"}

    def test_topology_unknown_cluster(self, client):
        assert client.get("/api/topology/mongodb/rs9").status_code == 404

    def test_topology_unknown_engine(self, client):
        assert client.get("/api/topology/oracle/rs0").status_code == 400

    def test_source_error(self):
        client = TestClient(create_app(Config(), source=FailingSource()))
        data = client.get("/api/health").json()
        assert data["status"] == "unknown"
        assert data["error_message"] == "Payload file not found: /nowhere.json"
