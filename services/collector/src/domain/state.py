from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class MetricsState:
    """Counters carried from the previous successful poll.

    Timestamps are epoch milliseconds. Cumulative counters come from
    monotonic control-plane counters, so deltas are only meaningful between
    polls of the same run.
    """

    start_time: int = 0
    last_poll_time: int = 0
    overall_transferred: int = 0
    spout_transferred: int = 0

    @classmethod
    def start(cls, now: int) -> "MetricsState":
        return cls(start_time=now, last_poll_time=now)

    def advance(
        self, now: int, overall_transferred: int, spout_transferred: int
    ) -> "MetricsState":
        return replace(
            self,
            last_poll_time=now,
            overall_transferred=overall_transferred,
            spout_transferred=spout_transferred,
        )
