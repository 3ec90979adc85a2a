"""CSV column names and value formats."""

TIME = "time(s)"
TOTAL_SLOTS = "total_slots"
USED_SLOTS = "used_slots"
WORKERS = "workers"
TASKS = "tasks"
EXECUTORS = "total_executors"
EXECUTORS_METRICS = "executors_with_metrics"
TRANSFERRED = "overall_transferred (messages)"
THROUGHPUT = "overall_throughput (messages/s)"
THROUGHPUT_MB = "overall_throughput (MB/s)"
SPOUT_EXECUTORS = "spout_executors"
SPOUT_TRANSFERRED = "spout_transferred (messages)"
SPOUT_ACKED = "spout_acked (messages)"
SPOUT_THROUGHPUT = "spout_throughput (messages/s)"
SPOUT_THROUGHPUT_MB = "spout_throughput (MB/s)"

BASE_COLUMNS = [
    TIME,
    TOTAL_SLOTS,
    USED_SLOTS,
    WORKERS,
    TASKS,
    EXECUTORS,
    EXECUTORS_METRICS,
    TRANSFERRED,
    THROUGHPUT,
    THROUGHPUT_MB,
    SPOUT_EXECUTORS,
    SPOUT_TRANSFERRED,
    SPOUT_ACKED,
    SPOUT_THROUGHPUT,
    SPOUT_THROUGHPUT_MB,
]

TIME_FORMAT = "%d"
THROUGHPUT_MB_FORMAT = "%.1f"
SPOUT_THROUGHPUT_MB_FORMAT = "%.3f"
SPOUT_AVG_LATENCY_FORMAT = "%.1f"
SPOUT_MAX_LATENCY_FORMAT = "%.1f"


def spout_avg_complete_latency_title(component_id: str) -> str:
    return f"{component_id}_avg_complete_latency(ms)"


def spout_max_complete_latency_title(component_id: str) -> str:
    return f"{component_id}_max_complete_latency(ms)"


def latency_columns(component_id: str) -> list[str]:
    return [
        spout_avg_complete_latency_title(component_id),
        spout_max_complete_latency_title(component_id),
    ]
