from __future__ import annotations

from typing import Iterable, List, Mapping

from src.core.errors import SchemaFrozenError
from src.metrics.columns import BASE_COLUMNS


class MetricsSchema:
    """Ordered, append-only set of CSV columns.

    Columns may only be added until ``freeze()`` is called after the first
    successful poll. Latency columns of components that first report later in
    the run are never written, so every row matches the single header line.
    """

    def __init__(self, columns: Iterable[str] = ()):
        self._columns: List[str] = []
        self._frozen = False
        self.extend(columns)

    @classmethod
    def with_base_columns(cls) -> "MetricsSchema":
        return cls(BASE_COLUMNS)

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def extend(self, columns: Iterable[str]) -> List[str]:
        """Append unseen columns in order; returns the ones actually added."""
        columns = list(columns)
        if self._frozen and columns:
            raise SchemaFrozenError(f"schema is frozen, cannot add {columns}")
        added = []
        for name in columns:
            if name not in self._columns:
                self._columns.append(name)
                added.append(name)
        return added

    def freeze(self) -> None:
        self._frozen = True

    def missing(self, row: Mapping[str, str]) -> List[str]:
        """Row keys that have no column."""
        return [k for k in row if k not in self._columns]

    def values(self, row: Mapping[str, str]) -> List[str]:
        """Row values in column order; unpopulated columns are empty."""
        return [row.get(name, "") for name in self._columns]

    def __len__(self) -> int:
        return len(self._columns)
