"""Turns one control-plane snapshot into a metrics row.

The aggregator never mutates the state it receives; the updated state is
returned alongside the row.
"""

from __future__ import annotations

import statistics
from typing import Dict, List, NamedTuple

from shared.constants import Streams, Windows
from src.core.errors import PartialExecutorData
from src.core.logger import get_logger
from src.domain.models import (
    ClusterSnapshot,
    ExecutorRecord,
    TopologyInfo,
    TopologySummary,
)
from src.domain.state import MetricsState
from src.metrics import columns as col

logger = get_logger("collector.aggregator")

MetricsRow = Dict[str, str]


class AggregationResult(NamedTuple):
    row: MetricsRow
    state: MetricsState
    new_columns: List[str]
    partial_executors: List[str]


class _ExecutorTotals:
    def __init__(self):
        self.overall_transferred = 0
        self.spout_transferred = 0
        self.spout_acked = 0
        self.executors_with_metrics = 0
        self.spout_executors = 0
        # component id -> latency observations, in discovery order
        self.latencies: Dict[str, List[float]] = {}
        self.partial: List[str] = []


def get_throughput(delta: int, delta_time_ms: int) -> float:
    """Messages per second; zero when no time has elapsed."""
    if delta_time_ms <= 0:
        return 0.0
    return delta * 1000.0 / delta_time_ms


def get_throughput_mb(delta: int, delta_time_ms: int, message_size: int) -> float:
    return get_throughput(delta, delta_time_ms) * message_size / 1_000_000


def latency_summary(values: List[float] | None) -> tuple[float, float]:
    """(mean, max) of one component's observations; (0.0, 0.0) when empty."""
    if not values:
        return 0.0, 0.0
    return statistics.mean(values), max(values)


class MetricsAggregator:
    def __init__(self, message_size: int):
        self.message_size = message_size

    def aggregate(
        self,
        cluster: ClusterSnapshot,
        topology: TopologySummary,
        info: TopologyInfo,
        state: MetricsState,
        now: int,
        is_first_poll: bool,
    ) -> AggregationResult:
        row: MetricsRow = {}
        self._supervisor_stats(cluster, row)
        self._topology_stats(topology, state, now, row)
        totals = self._executor_totals(info)

        new_columns: List[str] = []
        for component_id, values in totals.latencies.items():
            avg, max_ = latency_summary(values)
            row[col.spout_avg_complete_latency_title(component_id)] = (
                col.SPOUT_AVG_LATENCY_FORMAT % avg
            )
            row[col.spout_max_complete_latency_title(component_id)] = (
                col.SPOUT_MAX_LATENCY_FORMAT % max_
            )
            if is_first_poll:
                new_columns.extend(col.latency_columns(component_id))

        row[col.EXECUTORS_METRICS] = str(totals.executors_with_metrics)
        row[col.SPOUT_EXECUTORS] = str(totals.spout_executors)
        self._rates(totals, state, now, row)

        updated = state.advance(
            now, totals.overall_transferred, totals.spout_transferred
        )
        return AggregationResult(row, updated, new_columns, totals.partial)

    @staticmethod
    def _supervisor_stats(cluster: ClusterSnapshot, row: MetricsRow) -> None:
        row[col.TOTAL_SLOTS] = str(cluster.total_slots)
        row[col.USED_SLOTS] = str(cluster.used_slots)

    @staticmethod
    def _topology_stats(
        ts: TopologySummary, state: MetricsState, now: int, row: MetricsRow
    ) -> None:
        elapsed_ms = now - state.start_time
        row[col.TIME] = col.TIME_FORMAT % (elapsed_ms // 1000)
        row[col.WORKERS] = str(ts.num_workers)
        row[col.EXECUTORS] = str(ts.num_executors)
        row[col.TASKS] = str(ts.num_tasks)

    def _executor_totals(self, info: TopologyInfo) -> _ExecutorTotals:
        totals = _ExecutorTotals()
        for record in info.executors:
            if record.is_system:
                logger.debug(
                    "skip_system_component",
                    extra={"component": record.component_id},
                )
                continue
            if record.stats is None:
                err = PartialExecutorData(record.component_id)
                logger.warning(
                    "partial_executor_data",
                    extra={"component": record.component_id, "error": str(err)},
                )
                totals.partial.append(record.component_id)
                continue
            self._add_executor(record, info, totals)
        return totals

    @staticmethod
    def _add_executor(
        record: ExecutorRecord, info: TopologyInfo, totals: _ExecutorTotals
    ) -> None:
        stats = record.stats
        for stream in info.streams_for(record):
            totals.executors_with_metrics += 1
            transferred = stats.get_transferred(stream, Windows.ALL_TIME)
            totals.overall_transferred += transferred
            if not (stats.is_spout and Streams.is_source_stream(stream)):
                continue
            totals.spout_executors += 1
            totals.spout_transferred += transferred
            totals.spout_acked += stats.spout.get_acked(stream, Windows.ALL_TIME)
            lat = stats.spout.get_complete_latency(stream, Windows.ALL_TIME)
            totals.latencies.setdefault(record.component_id, []).append(lat)

    def _rates(
        self,
        totals: _ExecutorTotals,
        state: MetricsState,
        now: int,
        row: MetricsRow,
    ) -> None:
        time_diff = now - state.last_poll_time
        overall_diff = totals.overall_transferred - state.overall_transferred
        spout_diff = totals.spout_transferred - state.spout_transferred
        if overall_diff < 0 or spout_diff < 0:
            logger.warning(
                "transferred_counter_decreased",
                extra={"overall_diff": overall_diff, "spout_diff": spout_diff},
            )

        throughput = int(get_throughput(overall_diff, time_diff))
        throughput_mb = get_throughput_mb(overall_diff, time_diff, self.message_size)
        spout_throughput = int(get_throughput(spout_diff, time_diff))
        spout_throughput_mb = get_throughput_mb(
            spout_diff, time_diff, self.message_size
        )

        row[col.TRANSFERRED] = str(overall_diff)
        row[col.THROUGHPUT] = str(throughput)
        row[col.THROUGHPUT_MB] = col.THROUGHPUT_MB_FORMAT % throughput_mb
        row[col.SPOUT_TRANSFERRED] = str(spout_diff)
        row[col.SPOUT_ACKED] = str(totals.spout_acked)
        row[col.SPOUT_THROUGHPUT] = str(spout_throughput)
        row[col.SPOUT_THROUGHPUT_MB] = (
            col.SPOUT_THROUGHPUT_MB_FORMAT % spout_throughput_mb
        )
