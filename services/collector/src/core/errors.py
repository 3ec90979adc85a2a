"""Collector exception taxonomy.

``TransportError`` aborts a run. ``PollFailed`` subclasses skip a single poll
and the loop retries on the next interval.
"""

from __future__ import annotations


class CollectorError(Exception):
    """Base class for collector errors."""


class TransportError(CollectorError):
    """The control plane is unreachable or the connection broke."""


class PollFailed(CollectorError):
    """A poll produced no usable snapshot; the next interval retries."""


class ClusterUnavailable(PollFailed):
    """The control plane returned no cluster data."""


class TopologyNotFound(PollFailed):
    def __init__(self, topology: str):
        super().__init__(f"TopologySummary not found for {topology}")
        self.topology = topology


class PartialExecutorData(CollectorError):
    """An executor reported no statistics block.

    Reported through logging by the aggregator; the executor counts as zero.
    """

    def __init__(self, component_id: str):
        super().__init__(f"executor stats not found for component id: {component_id}")
        self.component_id = component_id


class SchemaFrozenError(CollectorError):
    """Columns were added after the schema was frozen."""
