"""Snapshot types describing one control-plane poll.

Created fresh from each response and discarded after aggregation.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.constants import Streams, Windows

# window -> stream -> value
WindowedCounts = Dict[str, Dict[str, int]]
WindowedLatencies = Dict[str, Dict[str, float]]


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class SupervisorSummary(_Snapshot):
    host: str = ""
    num_workers: int = 0
    num_used_workers: int = 0


class TopologySummary(_Snapshot):
    id: str
    name: str
    num_workers: int = 0
    num_executors: int = 0
    num_tasks: int = 0


class ClusterSnapshot(_Snapshot):
    supervisors: List[SupervisorSummary] = Field(default_factory=list)
    topologies: List[TopologySummary] = Field(default_factory=list)

    @property
    def total_slots(self) -> int:
        return sum(s.num_workers for s in self.supervisors)

    @property
    def used_slots(self) -> int:
        return sum(s.num_used_workers for s in self.supervisors)

    def find_topology(self, name: str) -> Optional[TopologySummary]:
        for ts in self.topologies:
            if ts.name == name:
                return ts
        return None


class SpoutStats(_Snapshot):
    acked: WindowedCounts = Field(default_factory=dict)
    complete_ms_avg: WindowedLatencies = Field(default_factory=dict)

    def get_acked(self, stream: str, window: str = Windows.ALL_TIME) -> int:
        return self.acked.get(window, {}).get(stream, 0)

    def get_complete_latency(self, stream: str, window: str = Windows.ALL_TIME) -> float:
        return self.complete_ms_avg.get(window, {}).get(stream, 0.0)


class ExecutorStats(_Snapshot):
    transferred: WindowedCounts = Field(default_factory=dict)
    # Set only for spout executors
    spout: Optional[SpoutStats] = None

    @property
    def is_spout(self) -> bool:
        return self.spout is not None

    def get_transferred(self, stream: str, window: str = Windows.ALL_TIME) -> int:
        return self.transferred.get(window, {}).get(stream, 0)

    def streams(self, window: str = Windows.ALL_TIME) -> List[str]:
        return list(self.transferred.get(window, {}).keys())


class ExecutorRecord(_Snapshot):
    component_id: str
    stats: Optional[ExecutorStats] = None

    @property
    def is_system(self) -> bool:
        return Streams.is_system_component(self.component_id)


class TopologyInfo(_Snapshot):
    id: str
    name: str = ""
    executors: List[ExecutorRecord] = Field(default_factory=list)
    # component id -> declared output streams
    component_streams: Dict[str, List[str]] = Field(default_factory=dict)

    def streams_for(self, record: ExecutorRecord) -> List[str]:
        """Declared streams of the record's component.

        Components missing from the static structure fall back to the streams
        present in their all-time transferred bucket.
        """
        declared = self.component_streams.get(record.component_id)
        if declared is not None:
            return list(declared)
        if record.stats is None:
            return []
        return record.stats.streams()
