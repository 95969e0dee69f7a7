from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class EventKind(Enum):
    ROUND_START = "INICIO RONDA PORTARIA"
    COLLECTOR_DISCHARGE = "DESCARGA DE COLETOR EFETUADA"
    GUARD_IDENTIFIED = "VIGIA"
    CHECKPOINT = "LOCAL"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class RawEvent:
    timestamp: datetime
    text: str
    line_number: int


@dataclass(frozen=True)
class ClassifiedEvent:
    """
    RawEvent + tipo semântico.
    Nunca é alterado depois de classificado; o monitor de rondas só referencia.
    """
    timestamp: datetime
    text: str
    line_number: int
    kind: EventKind

    # payload (só um dos dois aparece, conforme o tipo)
    guard_name: Optional[str] = None
    checkpoint_number: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: RawEvent, kind: EventKind, **payload) -> "ClassifiedEvent":
        return cls(
            timestamp=raw.timestamp,
            text=raw.text,
            line_number=raw.line_number,
            kind=kind,
            **payload,
        )
