"""Collection run: poll the control plane until the deadline.

States::

    INIT -> POLLING -> SLEEPING -> POLLING ... -> DONE
            POLLING -> FAILED_POLL -> SLEEPING      (cluster/topology missing)
            POLLING -> ABORTED -> DONE              (transport error)

Output files are opened in INIT and closed exactly once on the way to DONE.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from src.core.config import Settings
from src.core.errors import PollFailed, TopologyNotFound, TransportError
from src.core.logger import get_logger
from src.core.metrics import (
    LAST_SUCCESSFUL_POLL,
    PARTIAL_EXECUTORS_TOTAL,
    POLL_FAILURES_TOTAL,
    POLL_LATENCY,
    POLLS_TOTAL,
    ROWS_WRITTEN_TOTAL,
)
from src.domain.state import MetricsState
from src.infrastructure.files.writer import MetricsFileWriter, metrics_paths
from src.infrastructure.storm.client import ControlPlaneClient
from src.metrics.aggregator import MetricsAggregator
from src.metrics.schema import MetricsSchema

logger = get_logger("collector.poller")


def _now_ms() -> int:
    return int(time.time() * 1000)


class PollState(str, Enum):
    INIT = "init"
    POLLING = "polling"
    FAILED_POLL = "failed_poll"
    SLEEPING = "sleeping"
    ABORTED = "aborted"
    DONE = "done"


@dataclass
class RunSummary:
    conf_file: str = ""
    data_file: str = ""
    polls: int = 0
    rows_written: int = 0
    failed_polls: int = 0
    aborted: bool = False
    columns: List[str] = field(default_factory=list)
    state: Optional[MetricsState] = None


class MetricsPoller:
    def __init__(
        self,
        client: ControlPlaneClient,
        topology_name: str,
        path: str,
        poll_interval_ms: int = 30 * 1000,
        total_time_ms: int = 5 * 60 * 1000,
        message_size: int = 100,
        config: Optional[Mapping[str, Any]] = None,
        clock: Callable[[], int] = _now_ms,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.topology_name = topology_name
        self.path = path
        self.poll_interval_ms = poll_interval_ms
        self.total_time_ms = total_time_ms
        self.config = dict(config or {})
        self.aggregator = MetricsAggregator(message_size)
        self._clock = clock
        self._sleep = sleep

        self.phase = PollState.INIT
        self.schema = MetricsSchema.with_base_columns()
        self.state: Optional[MetricsState] = None
        self.summary = RunSummary()
        self._unlisted: set[str] = set()

    @classmethod
    def from_settings(
        cls, client: ControlPlaneClient, settings: Settings, **kwargs
    ) -> "MetricsPoller":
        return cls(
            client,
            topology_name=settings.topology_name,
            path=settings.metrics_path,
            poll_interval_ms=settings.metrics_poll_interval_ms,
            total_time_ms=settings.metrics_total_time_ms,
            message_size=settings.metrics_message_size,
            config=settings.storm_config(),
            **kwargs,
        )

    def _transition(self, phase: PollState) -> None:
        logger.debug(
            "poller_transition", extra={"from": self.phase.value, "to": phase.value}
        )
        self.phase = phase

    def run(self) -> RunSummary:
        """Collect until the deadline; raises TransportError after closing files."""
        self.phase = PollState.INIT
        now = self._clock()
        end_time = now + self.total_time_ms
        self.state = MetricsState.start(now)
        self.schema = MetricsSchema.with_base_columns()
        self._unlisted.clear()
        conf_file, data_file = metrics_paths(self.path, self.topology_name, now)
        self.summary = RunSummary(conf_file=conf_file, data_file=data_file)
        writer = MetricsFileWriter(conf_file, data_file)
        logger.info(
            "collection_started",
            extra={
                "topology": self.topology_name,
                "poll_interval_ms": self.poll_interval_ms,
                "total_time_ms": self.total_time_ms,
                "data_file": data_file,
            },
        )

        try:
            writer.open()
            writer.write_config(self.config)
            while now < end_time:
                self._transition(PollState.POLLING)
                try:
                    self.poll_once(writer, now)
                except PollFailed as exc:
                    self._transition(PollState.FAILED_POLL)
                    self.summary.failed_polls += 1
                    POLL_FAILURES_TOTAL.inc()
                    logger.error(
                        "poll_failed",
                        extra={
                            "error": str(exc),
                            "error_type": type(exc).__name__,
                            "topology": self.topology_name,
                        },
                    )
                self._transition(PollState.SLEEPING)
                self._sleep(self.poll_interval_ms / 1000.0)
                now = self._clock()
        except TransportError:
            self._transition(PollState.ABORTED)
            self.summary.aborted = True
            logger.exception("storm_metrics_failed")
            raise
        finally:
            writer.close()
            self.summary.columns = self.schema.columns
            self.summary.state = self.state
            self._transition(PollState.DONE)
            logger.info(
                "collection_finished",
                extra={
                    "polls": self.summary.polls,
                    "rows_written": self.summary.rows_written,
                    "failed_polls": self.summary.failed_polls,
                    "aborted": self.summary.aborted,
                },
            )
        return self.summary

    def poll_once(self, writer: MetricsFileWriter, now: int) -> None:
        """One query cycle; writes the header on the first successful poll."""
        self.summary.polls += 1
        POLLS_TOTAL.inc()
        with POLL_LATENCY.time():
            cluster = self.client.get_cluster_info()
            topology = cluster.find_topology(self.topology_name)
            if topology is None:
                raise TopologyNotFound(self.topology_name)
            info = self.client.get_topology_info(topology.id)

        first_poll = not self.schema.frozen
        result = self.aggregator.aggregate(
            cluster, topology, info, self.state, now, first_poll
        )
        if result.partial_executors:
            PARTIAL_EXECUTORS_TOTAL.inc(len(result.partial_executors))

        if first_poll:
            self.schema.extend(result.new_columns)
            self.schema.freeze()
            writer.write_header(self.schema.columns)
        else:
            self._report_unlisted(self.schema.missing(result.row))

        writer.write_row(self.schema.values(result.row))
        self.state = result.state
        self.summary.rows_written += 1
        ROWS_WRITTEN_TOTAL.inc()
        LAST_SUCCESSFUL_POLL.set(now / 1000.0)

    def _report_unlisted(self, columns: List[str]) -> None:
        fresh = [c for c in columns if c not in self._unlisted]
        if not fresh:
            return
        self._unlisted.update(fresh)
        logger.warning(
            "columns_discovered_after_first_poll",
            extra={"columns": fresh, "note": "schema frozen; values not written"},
        )
