from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .nonconformities import NonConformity, NonConformityKind


@dataclass
class CountTable:
    """
    Contagem incremental (tipo -> n, vigia -> n).
    """
    counts: Dict[object, int] = field(default_factory=dict)

    def add(self, key: object) -> None:
        self.counts[key] = self.counts.get(key, 0) + 1

    def ranked(self) -> Dict[object, int]:
        # sorted é estável: empates mantêm a ordem de primeira ocorrência
        return dict(sorted(self.counts.items(), key=lambda kv: kv[1], reverse=True))


@dataclass(frozen=True)
class AnalysisResult:
    """
    Saída final da auditoria. É o único contrato com relatórios/exportadores.
    """
    non_conformities: Tuple[NonConformity, ...]
    counts_by_type: Dict[NonConformityKind, int]
    counts_by_guard: Dict[str, int]
    has_rounds: bool

    @property
    def total(self) -> int:
        return len(self.non_conformities)

    @property
    def is_empty_log(self) -> bool:
        """Sem rondas e sem apontamentos: o texto não parece um relatório de rondas."""
        return not self.has_rounds and not self.non_conformities
