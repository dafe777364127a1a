"""Shared fixtures."""

import json

import pytest

from replicaset_monitor.config import Config, SourceConfig


@pytest.fixture
def payload():
    return {
        "mongodb": [
            {
                "rs0": [
                    {"nodename": "mongo-1", "status": "PRIMARY", "MongoStatus": "RUNNING", "freediskpercent": 60},
                    {"nodename": "mongo-2", "status": "SECONDARY", "MongoStatus": "RUNNING", "ReplicationLagSec": 45},
                    {"nodename": "mongo-3", "status": "ARBITER", "MongoStatus": "RUNNING"},
                ]
            }
        ],
        "postgresql": [
            {
                "pg-main": [
                    {"Hostname": "pg-1", "NodeStatus": "MASTER", "PGServiceStatus": "RUNNING"},
                    {"Hostname": "pg-2", "NodeStatus": "SLAVE", "PGServiceStatus": "STOPPED"},
                ]
            }
        ],
        "mssql": [
            {"Hostname": "sql-1", "ClusterName": "AG1", "NodeStatus": "PRIMARY", "Status": "RUNNING"},
            {"Hostname": "sql-9", "HARole": "STANDALONE", "Status": "RUNNING"},
        ],
    }


@pytest.fixture
def payload_file(tmp_path, payload):
    path = tmp_path / "nodes.json"
    path.write_text(json.dumps(payload))
    return path


@pytest.fixture
def config(payload_file):
    return Config(source=SourceConfig(type="file", path=str(payload_file)))
