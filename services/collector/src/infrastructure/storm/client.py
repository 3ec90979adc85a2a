"""Storm control-plane client over the Storm UI REST API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

import requests

from shared.constants import Streams, Windows
from src.core.errors import ClusterUnavailable, TopologyNotFound, TransportError
from src.core.logger import get_logger
from src.domain.models import ClusterSnapshot, ExecutorRecord, TopologyInfo
from src.infrastructure.storm import parser

logger = get_logger("collector.storm.client")

# Raised by the parser on payloads of an unexpected shape
MALFORMED = (ValueError, TypeError, AttributeError)


class ControlPlaneClient(Protocol):
    def get_cluster_info(self) -> ClusterSnapshot: ...

    def get_topology_info(self, topology_id: str) -> TopologyInfo: ...

    def close(self) -> None: ...


class StormUIClient:
    """Blocking client; one instance per collection run.

    Any failure of the HTTP exchange itself raises ``TransportError``. Bad
    answers from the cluster endpoints raise ``ClusterUnavailable`` so the poll
    loop can retry on the next interval. Counters are always requested for
    the all-time window.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.params = {"window": Windows.ALL_TIME, "sys": "false"}
        self.session = session or requests.Session()
        logger.info("storm_ui_client_created", extra={"base_url": self.base_url})

    def _get(self, path: str, params: Optional[dict] = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        resp.raise_for_status()
        return resp.json()

    def get_cluster_info(self) -> ClusterSnapshot:
        try:
            supervisors = parser.parse_supervisors(
                self._json(self._get("/api/v1/supervisor/summary"))
            )
            topologies = parser.parse_topology_summaries(
                self._json(self._get("/api/v1/topology/summary"))
            )
        except (requests.HTTPError, *MALFORMED) as exc:
            raise ClusterUnavailable(f"cluster summary unavailable: {exc}") from exc
        if supervisors is None:
            raise ClusterUnavailable("ClusterSummary not found")
        return ClusterSnapshot(supervisors=supervisors, topologies=topologies)

    def get_topology_info(self, topology_id: str) -> TopologyInfo:
        resp = self._get(f"/api/v1/topology/{topology_id}", self.params)
        if resp.status_code == 404:
            raise TopologyNotFound(topology_id)
        try:
            payload = self._json(resp)
            kinds = parser.parse_component_kinds(payload)
            name = str(payload.get("name", ""))
        except (requests.HTTPError, *MALFORMED) as exc:
            raise ClusterUnavailable(f"topology info unavailable: {exc}") from exc

        graph = self._stream_graph(topology_id)
        executors: List[ExecutorRecord] = []
        component_streams: Dict[str, List[str]] = {}
        for component_id, kind in kinds.items():
            record, reported = self._component(topology_id, component_id, kind)
            executors.append(record)
            if record.stats is not None:
                component_streams[component_id] = declared_streams(
                    kind, graph.get(component_id, []), reported
                )
        return TopologyInfo(
            id=topology_id,
            name=name,
            executors=executors,
            component_streams=component_streams,
        )

    def _stream_graph(self, topology_id: str) -> Dict[str, List[str]]:
        resp = self._get(f"/api/v1/topology/{topology_id}/visualization", self.params)
        try:
            return parser.parse_stream_graph(self._json(resp))
        except (requests.HTTPError, *MALFORMED) as exc:
            logger.warning(
                "stream_graph_unavailable",
                extra={"topology_id": topology_id, "error": str(exc)},
            )
            return {}

    def _component(
        self, topology_id: str, component_id: str, kind: str
    ) -> tuple[ExecutorRecord, List[str]]:
        resp = self._get(
            f"/api/v1/topology/{topology_id}/component/{component_id}", self.params
        )
        try:
            return parser.parse_component(component_id, self._json(resp), kind)
        except (requests.HTTPError, *MALFORMED) as exc:
            logger.debug(
                "component_stats_unavailable",
                extra={"component": component_id, "error": str(exc)},
            )
            return ExecutorRecord(component_id=component_id), []

    def close(self) -> None:
        self.session.close()


def declared_streams(kind: str, subscribed: List[str], reported: List[str]) -> List[str]:
    """Output streams of one component.

    Streams other components subscribe to come first, then any further stream
    the component has reported counters for. A spout with neither still
    declares ``default`` so its latency columns exist from the first poll.
    """
    streams = list(subscribed)
    streams += [s for s in reported if s not in streams]
    if not streams and kind == parser.SPOUT:
        streams.append(Streams.DEFAULT)
    return streams
