from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple

from .events import ClassifiedEvent


class NonConformityKind(Enum):
    """
    Tipos fechados de não conformidade.
    O valor é o rótulo exibido nos relatórios.
    """
    ROUND_NOT_STARTED = "Ronda não iniciada corretamente"
    INTERVAL_EXCEEDED = "Intervalo entre locais excedido"
    SEQUENCE_INCORRECT = "Sequência de locais incorreta"
    DISCHARGE_MISSING = "Descarga de coletor ausente"
    MULTIPLE_STARTS = "Múltiplos inícios de ronda"
    INCOMPLETE_ROUND = "Ronda incompleta"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class NonConformity:
    """
    Não conformidade detectada.
    associated_events reproduz os eventos que justificam o apontamento (auditoria).
    """
    id: str
    timestamp: datetime
    guard: str
    kind: NonConformityKind
    details: str
    associated_events: Tuple[ClassifiedEvent, ...] = ()
