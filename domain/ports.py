from __future__ import annotations

from typing import Protocol

from .models import AnalysisResult
from .nonconformities import NonConformity


class ResultSink(Protocol):
    def handle(self, result: AnalysisResult) -> None: ...


# -----------------------------
# Exportação linha-a-linha (CSV, planilha, etc.)
# -----------------------------

class NonConformitySink(Protocol):
    def publish(self, nc: NonConformity) -> None: ...
