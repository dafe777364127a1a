"""Tests for cluster aggregation."""

import pytest

from replicaset_monitor.aggregator import aggregate, build_report, cluster_key, promotable_targets
from replicaset_monitor.models import EngineKind, NodeRecord, Severity
from replicaset_monitor.normalize import normalize_node


@pytest.fixture
def mongo_nodes():
    return [
        {"nodename": "m1", "ClusterName": "rs0", "status": "PRIMARY", "MongoStatus": "RUNNING"},
        {"nodename": "m2", "ClusterName": "rs0", "status": "SECONDARY", "MongoStatus": "RUNNING"},
        {"nodename": "m3", "ClusterName": "rs1", "status": "PRIMARY", "MongoStatus": "STOPPED"},
        {"nodename": "m4", "ClusterName": "rs1", "status": "SECONDARY", "MongoStatus": "RUNNING"},
        {"nodename": "m5", "ClusterName": "rs2", "status": "SECONDARY", "freeDiskPercent": 5},
        {"nodename": "m6", "ClusterName": "rs0", "status": "SECONDARY", "MongoStatus": "RUNNING"},
    ]


class TestClusterKey:
    """Tests for cluster_key."""

    def test_mssql_standalone(self):
        node = normalize_node({"Hostname": "sql1", "ClusterName": "AG1", "HARole": "STANDALONE"}, "mssql")
        assert cluster_key(node) == "Standalone"

    def test_mssql_unknown_cluster(self):
        node = normalize_node({"Hostname": "sql1", "NodeStatus": "PRIMARY"}, "mssql")
        assert cluster_key(node) == "Standalone"

    def test_other_engines_keep_unknown(self):
        node = normalize_node({"Hostname": "pg1", "NodeStatus": "MASTER"}, "postgresql")
        assert cluster_key(node) == "Unknown"


class TestAggregate:
    """Tests for aggregate."""

    def test_mssql_standalone_grouping(self):
        nodes = [
            {"Hostname": "sql1", "clusterId": "", "role": "STANDALONE"},
            {"Hostname": "sql2", "clusterId": "AG1", "role": "PRIMARY"},
        ]
        groups = {g.cluster_id: g for g in aggregate(nodes, "mssql")}
        assert set(groups) == {"Standalone", "AG1"}
        assert groups["Standalone"].nodes[0].node.hostname == "sql1"
        assert groups["AG1"].nodes[0].node.hostname == "sql2"

    def test_groups_sorted_by_severity(self, mongo_nodes):
        groups = aggregate(mongo_nodes, "mongodb")
        assert [g.cluster_id for g in groups] == ["rs1", "rs2", "rs0"]
        assert [g.severity for g in groups] == [Severity.CRITICAL, Severity.WARNING, Severity.HEALTHY]

    def test_members_stable_sorted(self, mongo_nodes):
        groups = {g.cluster_id: g for g in aggregate(mongo_nodes, "mongodb")}
        assert [n.node.hostname for n in groups["rs0"].nodes] == ["m1", "m2", "m6"]
        assert [n.node.hostname for n in groups["rs1"].nodes] == ["m3", "m4"]

    def test_ties_keep_first_seen_order(self):
        nodes = [
            {"nodename": "b1", "ClusterName": "b", "status": "PRIMARY"},
            {"nodename": "a1", "ClusterName": "a", "status": "PRIMARY"},
        ]
        assert [g.cluster_id for g in aggregate(nodes, "mongodb")] == ["b", "a"]

    def test_group_severity_is_worst_member(self, mongo_nodes):
        for group in aggregate(mongo_nodes, "mongodb"):
            assert group.severity == min(n.severity for n in group.nodes)

    def test_covers_every_node_once(self, mongo_nodes):
        groups = aggregate(mongo_nodes, "mongodb")
        hostnames = [n.node.hostname for g in groups for n in g.nodes]
        assert sorted(hostnames) == ["m1", "m2", "m3", "m4", "m5", "m6"]

    def test_skips_malformed(self):
        groups = aggregate([{"nodename": "m1", "status": "PRIMARY"}, "garbage", None], "mongodb")
        assert sum(len(g.nodes) for g in groups) == 1

    def test_bad_values_do_not_abort_aggregation(self):
        nodes = [
            {"Hostname": "sql1", "ClusterName": "AG1", "NodeStatus": "PRIMARY", "AlwaysOnMetrics": {"Replicas": 1}},
            {"Hostname": "sql2", "ClusterName": "AG1", "NodeStatus": "SECONDARY", "FDPercent": 10**400},
        ]
        groups = aggregate(nodes, "mssql")
        assert [n.node.hostname for n in groups[0].nodes] == ["sql1", "sql2"]
        assert groups[0].nodes[1].node.free_disk_percent is None

    def test_empty(self):
        assert aggregate([], "postgresql") == []

    def test_deterministic(self, mongo_nodes):
        assert aggregate(mongo_nodes, "mongodb") == aggregate(mongo_nodes, "mongodb")


class TestBuildReport:
    """Tests for build_report."""

    def test_issue_lists(self, mongo_nodes):
        report = build_report(mongo_nodes, "mongodb")
        assert report.engine == EngineKind.MONGODB
        assert [i.hostname for i in report.critical_nodes] == ["m3"]
        assert report.critical_nodes[0].reason == "Service is not running"
        assert [i.hostname for i in report.warning_nodes] == ["m5"]
        assert report.warning_nodes[0].reason == "Low disk space (5.0% free)"

    def test_counts(self, mongo_nodes):
        report = build_report(mongo_nodes, "mongodb")
        assert report.total == 6
        assert report.critical_count == 1
        assert report.warning_count == 1
        assert report.healthy_count == 4
        assert report.severity == Severity.CRITICAL


class TestPromotableTargets:
    """Tests for promotable_targets."""

    def test_mongodb_running_secondaries(self, mongo_nodes):
        groups = {g.cluster_id: g for g in aggregate(mongo_nodes, "mongodb")}
        targets = promotable_targets(groups["rs0"], "mongodb")
        assert [t.node.hostname for t in targets] == ["m2", "m6"]

    def test_requires_running_service(self, mongo_nodes):
        groups = {g.cluster_id: g for g in aggregate(mongo_nodes, "mongodb")}
        # m5 has no service status reported
        assert promotable_targets(groups["rs2"], "mongodb") == []

    def test_postgresql_slaves(self):
        nodes = [
            {"Hostname": "pg1", "NodeStatus": "MASTER", "PGServiceStatus": "RUNNING"},
            {"Hostname": "pg2", "NodeStatus": "SLAVE", "PGServiceStatus": "RUNNING"},
            {"Hostname": "pg3", "NodeStatus": "SLAVE", "PGServiceStatus": "STOPPED"},
        ]
        group = aggregate(nodes, "postgresql")[0]
        assert [t.node.hostname for t in promotable_targets(group.nodes, "postgresql")] == ["pg2"]

    def test_mssql_secondaries(self):
        record = NodeRecord(
            hostname="sql2",
            cluster_id="AG1",
            engine=EngineKind.MSSQL,
            role="SECONDARY",
            service_status="RUNNING",
        )
        group = aggregate([record], "mssql")[0]
        assert len(promotable_targets(group, "mssql")) == 1
