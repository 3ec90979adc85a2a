"""Translate Storm UI REST payloads into snapshot types."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from shared.constants import Streams, Windows
from src.core.logger import get_logger
from src.domain.models import (
    ExecutorRecord,
    ExecutorStats,
    SpoutStats,
    SupervisorSummary,
    TopologySummary,
)

logger = get_logger("collector.storm.parser")

SPOUT = "spout"
BOLT = "bolt"


def parse_supervisors(payload: dict) -> Optional[List[SupervisorSummary]]:
    """Supervisor list from ``/api/v1/supervisor/summary``; None if absent."""
    raw = payload.get("supervisors")
    if not isinstance(raw, list):
        return None
    return [
        SupervisorSummary(
            host=str(s.get("host", "")),
            num_workers=_coerce_int(s.get("slotsTotal")),
            num_used_workers=_coerce_int(s.get("slotsUsed")),
        )
        for s in raw
        if isinstance(s, dict)
    ]


def parse_topology_summaries(payload: dict) -> List[TopologySummary]:
    """Running topologies from ``/api/v1/topology/summary``."""
    out = []
    for t in payload.get("topologies") or []:
        if not isinstance(t, dict) or not t.get("id"):
            continue
        out.append(
            TopologySummary(
                id=str(t["id"]),
                name=str(t.get("name", "")),
                num_workers=_coerce_int(t.get("workersTotal")),
                num_executors=_coerce_int(t.get("executorsTotal")),
                num_tasks=_coerce_int(t.get("tasksTotal")),
            )
        )
    return out


def parse_component_kinds(payload: dict) -> Dict[str, str]:
    """Component id -> ``spout`` or ``bolt`` from the ``/api/v1/topology/{id}`` page."""
    kinds: Dict[str, str] = {}
    for key, id_field, kind in (("spouts", "spoutId", SPOUT), ("bolts", "boltId", BOLT)):
        for c in payload.get(key) or []:
            cid = c.get(id_field)
            if cid:
                kinds[str(cid)] = kind
    return kinds


def parse_stream_graph(payload: dict) -> Dict[str, List[str]]:
    """Declared output streams per component from the visualization page.

    Every node lists its inputs as (source component, stream) pairs; the
    streams a component declares are the ones some other node subscribes to.
    Streams of system components are left out.
    """
    streams: Dict[str, List[str]] = {}
    for node in payload.values():
        if not isinstance(node, dict):
            continue
        for inp in node.get(":inputs") or []:
            if not isinstance(inp, dict):
                continue
            source, stream = inp.get(":component"), inp.get(":stream")
            if not source or not stream or Streams.is_system_component(str(source)):
                continue
            declared = streams.setdefault(str(source), [])
            if str(stream) not in declared:
                declared.append(str(stream))
    return streams


def parse_component(
    component_id: str, payload: dict, kind: Optional[str] = None
) -> tuple[ExecutorRecord, List[str]]:
    """Executor record and reported streams for one component page.

    ``kind`` comes from the topology page; the page's own ``componentType``
    is used when it is not known.

    The REST gateway reports output stats per stream aggregated over the
    component's executors, so one record stands for the whole component.
    """
    output_stats = payload.get("outputStats") if isinstance(payload, dict) else None
    if not isinstance(output_stats, list):
        logger.debug("component_without_output_stats", extra={"component": component_id})
        return ExecutorRecord(component_id=component_id), []

    streams: List[str] = []
    transferred: dict[str, int] = {}
    acked: dict[str, int] = {}
    latency: dict[str, float] = {}
    for entry in output_stats:
        stream = entry.get("stream")
        if not stream:
            continue
        streams.append(stream)
        transferred[stream] = _coerce_int(entry.get("transferred"))
        acked[stream] = _coerce_int(entry.get("acked"))
        latency[stream] = _coerce_float(entry.get("completeLatency"))

    spout = None
    window = Windows.ALL_TIME
    if (kind or payload.get("componentType")) == SPOUT:
        spout = SpoutStats(acked={window: acked}, complete_ms_avg={window: latency})
    stats = ExecutorStats(transferred={window: transferred}, spout=spout)
    return ExecutorRecord(component_id=component_id, stats=stats), streams


def _coerce_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        logger.warning("invalid_counter_value", extra={"value": value})
        return 0


def _coerce_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("invalid_latency_value", extra={"value": value})
        return 0.0
