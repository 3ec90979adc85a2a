import csv
from unittest.mock import MagicMock

import pytest
import requests
from prometheus_client import REGISTRY

from src.core.config import Settings
from src.core.errors import ClusterUnavailable, TransportError
from src.infrastructure.storm.client import StormUIClient
from src.metrics import columns as col
from src.services.poller import MetricsPoller, PollState

START = 1_700_000_000_000


class FakeClock:
    """Millisecond clock advanced only by sleep()."""

    def __init__(self, start=START):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += int(seconds * 1000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_poller(tmp_path, clock):
    def _make(client, total_time_ms=60_000, **kwargs):
        return MetricsPoller(
            client,
            topology_name="benchmark",
            path=str(tmp_path),
            poll_interval_ms=30_000,
            total_time_ms=total_time_ms,
            message_size=100,
            config=kwargs.pop("config", {"topology_name": "benchmark"}),
            clock=clock,
            sleep=clock.sleep,
            **kwargs,
        )

    return _make


def _read_csv(path):
    with open(path, newline="") as fh:
        return list(csv.reader(fh))


def _sample(name):
    return REGISTRY.get_sample_value(name) or 0.0


class TestMetricsPollerRun:
    def test_writes_header_once_and_a_row_per_poll(self, make_poller, mock_client):
        summary = make_poller(mock_client, total_time_ms=90_000).run()

        rows = _read_csv(summary.data_file)
        header, data = rows[0], rows[1:]
        assert summary.polls == 3
        assert summary.rows_written == 3
        assert len(data) == 3
        assert header[: len(col.BASE_COLUMNS)] == col.BASE_COLUMNS
        assert header[len(col.BASE_COLUMNS) :] == col.latency_columns("spout")
        assert all(len(r) == len(header) for r in data)
        assert [r[0] for r in data] == ["0", "30", "60"]

    def test_output_file_names(self, make_poller, mock_client, tmp_path):
        summary = make_poller(mock_client).run()

        assert summary.data_file == f"{tmp_path}/benchmark_metrics_{START}.csv"
        assert summary.conf_file == f"{tmp_path}/benchmark_metrics_{START}.conf"

    def test_config_snapshot_written(self, make_poller, mock_client):
        poller = make_poller(mock_client, config={"b": 1, "a": "x"})

        summary = poller.run()

        with open(summary.conf_file) as fh:
            assert fh.read() == "a=x\nb=1\n"

    def test_throughput_between_polls(self, make_poller, mock_client, topology_info):
        mock_client.get_topology_info.side_effect = [
            topology_info(spout_transferred=1000, bolt_transferred=0),
            topology_info(spout_transferred=4000, bolt_transferred=0),
        ]

        summary = make_poller(mock_client).run()

        rows = _read_csv(summary.data_file)
        header = rows[0]
        second = dict(zip(header, rows[2]))
        assert second[col.THROUGHPUT] == "100"
        assert second[col.TRANSFERRED] == "3000"
        assert summary.state.overall_transferred == 4000
        assert summary.state.last_poll_time == START + 30_000

    def test_sleeps_poll_interval_between_cycles(self, make_poller, mock_client, clock):
        make_poller(mock_client).run()

        assert clock.sleeps == [30.0, 30.0]

    def test_no_polls_when_total_time_is_zero(self, make_poller, mock_client):
        summary = make_poller(mock_client, total_time_ms=0).run()

        assert summary.polls == 0
        mock_client.get_cluster_info.assert_not_called()
        with open(summary.data_file) as fh:
            assert fh.read() == ""


class TestFailedPolls:
    def test_missing_topology_skips_poll(
        self, make_poller, mock_client, cluster, caplog
    ):
        caplog.set_level("ERROR")
        no_topology = cluster.model_copy(update={"topologies": []})
        mock_client.get_cluster_info.side_effect = [no_topology, cluster]

        poller = make_poller(mock_client)
        summary = poller.run()

        assert summary.polls == 2
        assert summary.failed_polls == 1
        assert summary.rows_written == 1
        assert summary.aborted is False
        assert poller.phase is PollState.DONE
        mock_client.get_topology_info.assert_called_once()
        rows = _read_csv(summary.data_file)
        # header written on the first successful poll
        assert len(rows) == 2
        assert rows[1][0] == "30"
        assert any("poll_failed" in r.message for r in caplog.records)

    def test_cluster_unavailable_keeps_state(self, make_poller, mock_client, cluster):
        mock_client.get_cluster_info.side_effect = [cluster, ClusterUnavailable("down")]

        summary = make_poller(mock_client).run()

        assert summary.rows_written == 1
        assert summary.failed_polls == 1
        assert summary.state.last_poll_time == START

    def test_failed_poll_counted(self, make_poller, mock_client):
        before = _sample("collector_poll_failures_total")
        mock_client.get_cluster_info.side_effect = ClusterUnavailable("down")

        summary = make_poller(mock_client).run()

        assert summary.rows_written == 0
        assert _sample("collector_poll_failures_total") - before == 2


class TestAbort:
    def test_transport_error_aborts_and_closes_files(
        self, make_poller, mock_client, cluster
    ):
        mock_client.get_cluster_info.side_effect = [
            cluster,
            TransportError("connection refused"),
        ]
        poller = make_poller(mock_client, total_time_ms=300_000)

        with pytest.raises(TransportError):
            poller.run()

        assert poller.summary.aborted is True
        assert poller.summary.rows_written == 1
        assert poller.phase is PollState.DONE
        rows = _read_csv(poller.summary.data_file)
        assert len(rows) == 2
        assert len(rows[1]) == len(rows[0])


class TestSchemaDiscovery:
    def test_late_component_not_added_to_schema(
        self, make_poller, mock_client, topology_info, spout_record, caplog
    ):
        caplog.set_level("WARNING")
        late = topology_info()
        late = late.model_copy(
            update={
                "executors": late.executors
                + [spout_record("late", {"default": 5}, latency={"default": 1.0})],
                "component_streams": {**late.component_streams, "late": ["default"]},
            }
        )
        mock_client.get_topology_info.side_effect = [topology_info(), late, late]

        summary = make_poller(mock_client, total_time_ms=90_000).run()

        rows = _read_csv(summary.data_file)
        assert "late_avg_complete_latency(ms)" not in rows[0]
        assert all(len(r) == len(rows[0]) for r in rows)
        warnings = [
            r for r in caplog.records if "columns_discovered_after_first_poll" in r.message
        ]
        assert len(warnings) == 1

    def test_schema_frozen_after_first_success(self, make_poller, mock_client):
        poller = make_poller(mock_client)

        poller.run()

        assert poller.schema.frozen is True
        assert poller.summary.columns == poller.schema.columns


def test_from_settings(tmp_path, mock_client):
    settings = Settings(
        topology_name="wc",
        metrics_path=str(tmp_path),
        metrics_poll_interval_ms=1000,
        metrics_total_time_ms=5000,
        metrics_message_size=250,
    )

    poller = MetricsPoller.from_settings(mock_client, settings)

    assert poller.topology_name == "wc"
    assert poller.poll_interval_ms == 1000
    assert poller.total_time_ms == 5000
    assert poller.aggregator.message_size == 250
    assert poller.config["topology_name"] == "wc"


def _ui_response(payload):
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = payload
    return resp


def _storm_ui_session(spout_pages):
    """Session serving a one-spout topology; spout page answers change per poll."""
    spout_resp = MagicMock(status_code=200)
    spout_resp.json.side_effect = spout_pages
    routes = {
        "/api/v1/supervisor/summary": _ui_response(
            {"supervisors": [{"host": "h1", "slotsTotal": 4, "slotsUsed": 1}]}
        ),
        "/api/v1/topology/summary": _ui_response(
            {"topologies": [{"id": "benchmark-1-1", "name": "benchmark"}]}
        ),
        "/api/v1/topology/benchmark-1-1": _ui_response(
            {"name": "benchmark", "spouts": [{"spoutId": "spout"}], "bolts": []}
        ),
        "/api/v1/topology/benchmark-1-1/visualization": _ui_response({}),
        "/component/spout": spout_resp,
    }
    session = MagicMock()

    def _get(url, params=None, timeout=None):
        for suffix, resp in routes.items():
            if url.endswith(suffix):
                return resp
        raise AssertionError(f"unexpected GET {url}")

    session.get.side_effect = _get
    return session


class TestAgainstStormUI:
    def test_idle_spout_gets_latency_columns_on_first_poll(self, make_poller):
        active = {
            "componentType": "spout",
            "outputStats": [
                {"stream": "default", "transferred": 300, "acked": 300, "completeLatency": "12.5"}
            ],
        }
        session = _storm_ui_session(
            [{"componentType": "spout", "outputStats": []}, active, active]
        )
        client = StormUIClient("http://ui", session=session)

        summary = make_poller(client, total_time_ms=90_000).run()

        rows = _read_csv(summary.data_file)
        header = rows[0]
        assert header[len(col.BASE_COLUMNS) :] == col.latency_columns("spout")
        first, last = dict(zip(header, rows[1])), dict(zip(header, rows[-1]))
        assert first["spout_avg_complete_latency(ms)"] == "0.0"
        assert last["spout_avg_complete_latency(ms)"] == "12.5"
        assert last["spout_max_complete_latency(ms)"] == "12.5"

    def test_unexpected_request_failure_aborts_run(self, make_poller):
        session = _storm_ui_session([])
        session.get.side_effect = requests.exceptions.ChunkedEncodingError("truncated")
        poller = make_poller(StormUIClient("http://ui", session=session))

        with pytest.raises(TransportError):
            poller.run()

        assert poller.summary.aborted is True
        assert poller.phase is PollState.DONE
