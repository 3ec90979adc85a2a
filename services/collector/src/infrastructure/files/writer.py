"""Output files for a collection run.

A ``.conf`` snapshot of the effective configuration and a ``.csv`` file with
one header line and one line per successful poll. Every write is flushed so a
terminated run still leaves well-formed files behind.
"""

from __future__ import annotations

import csv
import os
from typing import IO, Any, Mapping, Optional, Sequence

from src.core.logger import get_logger

logger = get_logger("collector.writer")

METRICS_CONF_FORMAT = "{path}/{topology}_metrics_{start}.conf"
METRICS_FILE_FORMAT = "{path}/{topology}_metrics_{start}.csv"


def metrics_paths(path: str, topology: str, start_ms: int) -> tuple[str, str]:
    """(conf_file, csv_file) for a run started at ``start_ms``."""
    base = path.rstrip("/")
    return (
        METRICS_CONF_FORMAT.format(path=base, topology=topology, start=start_ms),
        METRICS_FILE_FORMAT.format(path=base, topology=topology, start=start_ms),
    )


class MetricsFileWriter:
    def __init__(self, conf_file: str, data_file: str):
        self.conf_file = conf_file
        self.data_file = data_file
        self._conf: Optional[IO[str]] = None
        self._data: Optional[IO[str]] = None
        self._csv = None
        self._header: Optional[list[str]] = None

    def open(self) -> "MetricsFileWriter":
        for target in (self.conf_file, self.data_file):
            parent = os.path.dirname(target)
            if parent:
                os.makedirs(parent, exist_ok=True)
        self._conf = open(self.conf_file, "w", encoding="utf-8")
        self._data = open(self.data_file, "w", encoding="utf-8", newline="")
        self._csv = csv.writer(self._data, lineterminator="\n")
        logger.info(
            "metrics_files_opened",
            extra={"conf_file": self.conf_file, "data_file": self.data_file},
        )
        return self

    @property
    def header_written(self) -> bool:
        return self._header is not None

    def write_config(self, config: Mapping[str, Any]) -> None:
        logger.info("writing_config_snapshot", extra={"entries": len(config)})
        for key in sorted(config):
            self._conf.write(f"{key}={config[key]}\n")
        self._conf.flush()

    def write_header(self, columns: Sequence[str]) -> None:
        logger.info("writing_csv_header", extra={"columns": len(columns)})
        self._header = list(columns)
        self._csv.writerow(self._header)
        self._data.flush()

    def write_row(self, values: Sequence[str]) -> None:
        if self._header is not None and len(values) != len(self._header):
            raise ValueError(
                f"row has {len(values)} values, header has {len(self._header)}"
            )
        logger.info("writing_csv_row")
        self._csv.writerow(list(values))
        self._data.flush()

    def close(self) -> None:
        for name in ("_data", "_conf"):
            fh = getattr(self, name)
            if fh is None:
                continue
            try:
                fh.flush()
                fh.close()
            except Exception:  # noqa: BLE001
                logger.exception("error closing file", extra={"file": fh.name})
            setattr(self, name, None)
        self._csv = None
