"""Prometheus self-metrics for the collector process."""

from shared.metrics import get_counter, get_gauge, get_histogram

SERVICE = "collector"

POLLS_TOTAL = get_counter("polls_total", "Total control-plane poll cycles", SERVICE)
POLL_FAILURES_TOTAL = get_counter(
    "poll_failures_total", "Poll cycles skipped due to missing cluster data", SERVICE
)
ROWS_WRITTEN_TOTAL = get_counter(
    "rows_written_total", "Metrics rows written to the CSV output", SERVICE
)
PARTIAL_EXECUTORS_TOTAL = get_counter(
    "partial_executors_total", "Executor records without statistics", SERVICE
)

POLL_LATENCY = get_histogram(
    "poll_latency_seconds", "Time spent querying the control plane per poll", SERVICE
)

LAST_SUCCESSFUL_POLL = get_gauge(
    "last_successful_poll_timestamp_seconds",
    "Unix time of the last poll that produced a row",
    SERVICE,
)
