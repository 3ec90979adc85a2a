from unittest.mock import MagicMock

import pytest

from shared.constants import Windows
from src.domain.models import (
    ClusterSnapshot,
    ExecutorRecord,
    ExecutorStats,
    SpoutStats,
    SupervisorSummary,
    TopologyInfo,
    TopologySummary,
)

ALL = Windows.ALL_TIME


@pytest.fixture
def spout_record():
    """Factory for spout executor records keyed by stream."""

    def _make(component_id, transferred, acked=None, latency=None):
        acked = acked or {}
        latency = latency or {}
        return ExecutorRecord(
            component_id=component_id,
            stats=ExecutorStats(
                transferred={ALL: dict(transferred)},
                spout=SpoutStats(
                    acked={ALL: dict(acked)}, complete_ms_avg={ALL: dict(latency)}
                ),
            ),
        )

    return _make


@pytest.fixture
def bolt_record():
    def _make(component_id, transferred):
        return ExecutorRecord(
            component_id=component_id,
            stats=ExecutorStats(transferred={ALL: dict(transferred)}),
        )

    return _make


@pytest.fixture
def cluster():
    return ClusterSnapshot(
        supervisors=[
            SupervisorSummary(host="sup1", num_workers=4, num_used_workers=2),
            SupervisorSummary(host="sup2", num_workers=6, num_used_workers=3),
        ],
        topologies=[
            TopologySummary(
                id="benchmark-1-1700000000",
                name="benchmark",
                num_workers=3,
                num_executors=12,
                num_tasks=14,
            )
        ],
    )


@pytest.fixture
def topology(cluster):
    return cluster.topologies[0]


@pytest.fixture
def topology_info(spout_record, bolt_record):
    """One spout emitting 'default', one bolt, and the system acker."""

    def _make(spout_transferred=1000, bolt_transferred=500, latency=10.0):
        executors = [
            spout_record(
                "spout",
                {"default": spout_transferred},
                acked={"default": spout_transferred},
                latency={"default": latency},
            ),
            bolt_record("split", {"default": bolt_transferred}),
            bolt_record("__acker", {"default": 99999}),
        ]
        return TopologyInfo(
            id="benchmark-1-1700000000",
            name="benchmark",
            executors=executors,
            component_streams={
                "spout": ["default"],
                "split": ["default"],
                "__acker": ["default"],
            },
        )

    return _make


@pytest.fixture
def mock_client(cluster, topology_info):
    client = MagicMock()
    client.get_cluster_info.return_value = cluster
    client.get_topology_info.return_value = topology_info()
    return client
