"""Tests for telemetry sources."""

import json

import httpx
import pytest

from replicaset_monitor.config import SourceConfig
from replicaset_monitor.sources import FileSource, HttpSource, SourceError, create_source


PAYLOAD = {
    "mongodb": [{"rs0": [{"nodename": "m1", "status": "PRIMARY"}]}],
    "postgresql": [],
    "mssql": [],
}


class TestFileSource:
    """Tests for FileSource."""

    def test_json(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text(json.dumps(PAYLOAD))
        assert FileSource(path).fetch() == PAYLOAD

    def test_yaml(self, tmp_path):
        path = tmp_path / "nodes.yaml"
        path.write_text("mongodb:\n  - nodename: m1\n    status: PRIMARY\n")
        payload = FileSource(path).fetch()
        assert payload["mongodb"][0]["nodename"] == "m1"

    def test_data_envelope(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text(json.dumps({"data": PAYLOAD}))
        assert FileSource(path).fetch() == PAYLOAD

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError, match="not found"):
            FileSource(tmp_path / "missing.json").fetch()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text("{not json")
        with pytest.raises(SourceError):
            FileSource(path).fetch()

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(SourceError, match="expected an object"):
            FileSource(path).fetch()


class TestHttpSource:
    """Tests for HttpSource."""

    URL = "https://monitor.local/api/v1/status/nodeshealth"

    def fake_get(self, status_code=200, body=None, captured=None):
        def get(url, headers=None, timeout=None):
            if captured is not None:
                captured.update(url=url, headers=headers, timeout=timeout)
            return httpx.Response(
                status_code,
                json=body if body is not None else {"data": PAYLOAD},
                request=httpx.Request("GET", url),
            )
        return get

    def test_fetch(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(httpx, "get", self.fake_get(captured=captured))
        payload = HttpSource(self.URL, token="secret", timeout=5).fetch()
        assert payload == PAYLOAD
        assert captured["headers"]["Authorization"] == "Bearer secret"
        assert captured["timeout"] == 5

    def test_no_token_no_auth_header(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(httpx, "get", self.fake_get(captured=captured))
        HttpSource(self.URL).fetch()
        assert "Authorization" not in captured["headers"]

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(httpx, "get", self.fake_get(status_code=503, body={}))
        with pytest.raises(SourceError, match="503"):
            HttpSource(self.URL).fetch()

    def test_connection_error(self, monkeypatch):
        def get(url, headers=None, timeout=None):
            raise httpx.ConnectError("connection refused")
        monkeypatch.setattr(httpx, "get", get)
        with pytest.raises(SourceError, match="connection refused"):
            HttpSource(self.URL).fetch()


class TestCreateSource:
    """Tests for create_source."""

    def test_file(self):
        source = create_source(SourceConfig(type="file", path="nodes.json"))
        assert isinstance(source, FileSource)

    def test_http(self):
        source = create_source(SourceConfig(type="http", url="https://x", token="t", timeout=3))
        assert isinstance(source, HttpSource)
        assert source.timeout == 3

    def test_missing_path(self):
        with pytest.raises(ValueError, match="path"):
            create_source(SourceConfig(type="file"))

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown source type"):
            create_source(SourceConfig(type="kafka", path="x"))
