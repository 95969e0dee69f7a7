from __future__ import annotations

import csv
import os
from datetime import datetime
from typing import List

from domain.nonconformities import NonConformity
from domain.ports import NonConformitySink

HEADER = ["id", "data", "vigia", "tipo", "detalhes", "linhas"]


class CsvNonConformityWriter(NonConformitySink):
    """
    Exporta não conformidades em CSV (uma linha por apontamento).
    Bufferiza e grava a cada flush_every_n; close() grava o resto.
    """

    def __init__(self, csv_path: str, *, flush_every_n: int = 200):
        self.csv_path = csv_path
        self.flush_every_n = flush_every_n
        self._batch: List[NonConformity] = []
        self.total_written = 0

    def __enter__(self) -> "CsvNonConformityWriter":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()

    def publish(self, nc: NonConformity) -> None:
        self._batch.append(nc)
        if len(self._batch) >= self.flush_every_n:
            self.flush()

    def close(self) -> None:
        self.flush()

    @staticmethod
    def _fmt_ts(ts: datetime) -> str:
        return ts.strftime("%d/%m/%Y %H:%M:%S")

    def _ensure_header(self) -> None:
        if not os.path.exists(self.csv_path) or os.path.getsize(self.csv_path) == 0:
            with open(self.csv_path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(HEADER)

    def flush(self) -> None:
        if not self._batch:
            return
        self._ensure_header()
        with open(self.csv_path, "a", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            for nc in self._batch:
                w.writerow([
                    nc.id,
                    self._fmt_ts(nc.timestamp),
                    nc.guard,
                    nc.kind.label,
                    nc.details,
                    " ".join(str(ev.line_number) for ev in nc.associated_events),
                ])
        self.total_written += len(self._batch)
        self._batch.clear()
