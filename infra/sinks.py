from __future__ import annotations

from typing import Callable, Optional

from domain.models import AnalysisResult
from domain.ports import ResultSink


class PrintSink(ResultSink):
    def __init__(self, top_n: int = 10, *, write: Optional[Callable[[str], None]] = None):
        self.top_n = top_n
        self._write = write or (lambda text: print(text, flush=True))

    def handle(self, result: AnalysisResult) -> None:
        lines = []
        lines.append(
            f"Não conformidades: {result.total:,} | vigias={len(result.counts_by_guard)} "
            f"| rondas={'sim' if result.has_rounds else 'não'}"
        )

        if result.is_empty_log:
            lines.append("Nenhum evento de ronda válido encontrado no relatório. Verifique o formato do texto.")
            self._write("\n".join(lines) + "\n")
            return

        if not result.non_conformities:
            lines.append("Nenhuma não conformidade encontrada.")
            self._write("\n".join(lines) + "\n")
            return

        lines.append("Por tipo:")
        for kind, n in self._top(result.counts_by_type):
            lines.append(f"  {n:>5} | {kind.label}")

        lines.append("Por vigia:")
        for guard, n in self._top(result.counts_by_guard):
            lines.append(f"  {n:>5} | {guard}")

        lines.append("Data | Vigia | Tipo da falha | Detalhes")
        for nc in result.non_conformities:
            lines.append(
                f"  {nc.timestamp.strftime('%d/%m/%Y %H:%M:%S')} | {nc.guard} | {nc.kind.label} | {nc.details}"
            )

        self._write("\n".join(lines) + "\n")

    def _top(self, counts: dict) -> list:
        rows = list(counts.items())
        if self.top_n > 0:
            rows = rows[: self.top_n]
        return rows
