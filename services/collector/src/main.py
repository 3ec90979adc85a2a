from __future__ import annotations

import sys

from prometheus_client import start_http_server

from src.core.config import settings
from src.core.errors import TransportError
from src.core.logger import configure_logging, get_logger
from src.infrastructure.storm.client import StormUIClient
from src.services.poller import MetricsPoller

logger = get_logger("main")


def run() -> int:
    configure_logging()
    logger.info("storm_metrics_collector_starting", extra={"topology": settings.topology_name})

    if settings.collector_metrics_port:
        start_http_server(settings.collector_metrics_port)
        logger.info("metrics_listening", extra={"port": settings.collector_metrics_port})

    client = StormUIClient(
        settings.storm_ui_url, timeout=settings.storm_ui_timeout_seconds
    )
    poller = MetricsPoller.from_settings(client, settings)
    try:
        summary = poller.run()
    except TransportError:
        return 1
    finally:
        client.close()

    logger.info(
        "storm_metrics_collector_stopped",
        extra={"data_file": summary.data_file, "rows_written": summary.rows_written},
    )
    return 0


def main() -> None:  # pragma: no cover - small wrapper
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt_shutdown")
    except Exception:  # noqa: BLE001
        logger.exception("fatal_error_main")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
