from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from domain.errors import PreconditionError
from domain.events import ClassifiedEvent, EventKind
from domain.nonconformities import NonConformity, NonConformityKind
from domain.settings import AuditSettings

UNKNOWN_GUARD = "Desconhecido"


def _fmt_time(ts: datetime) -> str:
    return ts.strftime("%H:%M:%S")


def _fmt_datetime(ts: datetime) -> str:
    return ts.strftime("%d/%m/%Y %H:%M:%S")


@dataclass
class ScanState:
    """
    Acumulador de uma única varredura (não é compartilhado entre chamadas).
    """
    current_guard: str = UNKNOWN_GUARD
    in_round: bool = False
    buffer: List[ClassifiedEvent] = field(default_factory=list)
    found: List[NonConformity] = field(default_factory=list)

    last_timestamp: Optional[datetime] = None
    ordinal: int = 0


class RoundMonitor:
    """
    Reconstrói as rondas a partir dos eventos classificados (já em ordem
    cronológica) e gera as não conformidades.

    Estados: fora de ronda (Idle) e em ronda (InRound).
    Não lança por conteúdo ruim do relatório; só por eventos fora de ordem.
    """

    def __init__(self, settings: AuditSettings):
        self.settings = settings

    # -----------------------------
    # API
    # -----------------------------

    def scan(self, events: Sequence[ClassifiedEvent]) -> List[NonConformity]:
        state = ScanState()
        for i, ev in enumerate(events):
            nxt = events[i + 1] if i + 1 < len(events) else None
            state = self.step(state, ev, nxt)
        state = self.finish(state)
        return state.found

    def step(
        self,
        state: ScanState,
        ev: ClassifiedEvent,
        next_event: Optional[ClassifiedEvent] = None,
    ) -> ScanState:
        if state.last_timestamp is not None and ev.timestamp < state.last_timestamp:
            raise PreconditionError(
                f"Eventos fora de ordem: linha {ev.line_number} ({ev.timestamp.isoformat()}) "
                f"antes de {state.last_timestamp.isoformat()}"
            )
        state.last_timestamp = ev.timestamp

        if ev.kind is EventKind.GUARD_IDENTIFIED:
            self._on_guard(state, ev)
        elif ev.kind is EventKind.ROUND_START:
            self._on_round_start(state, ev, next_event)
        elif ev.kind is EventKind.CHECKPOINT:
            self._on_checkpoint(state, ev)
        elif ev.kind is EventKind.COLLECTOR_DISCHARGE:
            self._on_discharge(state, ev)
        elif state.in_round:
            state.buffer.append(ev)

        return state

    def finish(self, state: ScanState) -> ScanState:
        """
        Fim do relatório com ronda aberta: sem descarga.
        """
        if not state.in_round or not state.buffer:
            return state

        last = state.buffer[-1]
        self._check_completeness(state, last.timestamp, "Ronda não finalizada com")
        self._emit(
            state,
            NonConformityKind.DISCHARGE_MISSING,
            last.timestamp,
            f"A ronda iniciada em {_fmt_datetime(state.buffer[0].timestamp)} não teve registro de descarga.",
            list(state.buffer),
        )
        state.in_round = False
        state.buffer = []
        return state

    # -----------------------------
    # Transições
    # -----------------------------

    def _on_guard(self, state: ScanState, ev: ClassifiedEvent) -> None:
        # atribuição "grudenta": vale até aparecer outro vigia
        state.current_guard = ev.guard_name or state.current_guard
        if state.in_round:
            state.buffer.append(ev)

    def _on_round_start(
        self,
        state: ScanState,
        ev: ClassifiedEvent,
        next_event: Optional[ClassifiedEvent],
    ) -> None:
        if state.in_round:
            first = state.buffer[0] if state.buffer else ev
            self._check_completeness(state, first.timestamp, "Ronda anterior interrompida com")
            self._emit(
                state,
                NonConformityKind.MULTIPLE_STARTS,
                ev.timestamp,
                f"Nova ronda iniciada sem a finalização da anterior (iniciada em {_fmt_time(first.timestamp)}).",
                state.buffer + [ev],
            )

        state.in_round = True
        state.buffer = [ev]

        # nome do vigia costuma vir logo depois do marcador de início
        if (
            next_event is not None
            and next_event.kind is EventKind.GUARD_IDENTIFIED
            and next_event.guard_name
        ):
            state.current_guard = next_event.guard_name

    def _on_checkpoint(self, state: ScanState, ev: ClassifiedEvent) -> None:
        if not state.in_round:
            self._emit(
                state,
                NonConformityKind.ROUND_NOT_STARTED,
                ev.timestamp,
                f"Registro de local #{ev.checkpoint_number} encontrado fora de uma ronda ativa.",
                [ev],
            )
            return

        prev = self._last_checkpoint(state.buffer)
        snapshot = state.buffer + [ev]

        if prev is not None:
            if ev.checkpoint_number != prev.checkpoint_number + 1:
                self._emit(
                    state,
                    NonConformityKind.SEQUENCE_INCORRECT,
                    ev.timestamp,
                    f"Sequência incorreta: pulou de Local {prev.checkpoint_number} para Local {ev.checkpoint_number}.",
                    snapshot,
                )

            elapsed = (ev.timestamp - prev.timestamp).total_seconds() / 60.0
            limit = self.settings.max_interval_minutes
            if elapsed > limit and not self.settings.is_dinner_time(ev.timestamp):
                self._emit(
                    state,
                    NonConformityKind.INTERVAL_EXCEEDED,
                    ev.timestamp,
                    f"Intervalo de {math.floor(elapsed + 0.5)} min entre Local {prev.checkpoint_number} e {ev.checkpoint_number} "
                    f"(limite: {limit:g} min). Pausa longa fora do horário de janta.",
                    snapshot,
                )

        state.buffer.append(ev)

    def _on_discharge(self, state: ScanState, ev: ClassifiedEvent) -> None:
        # descarga fora de ronda não é apontada
        if not state.in_round:
            return

        state.buffer.append(ev)
        self._check_completeness(state, ev.timestamp, "Ronda finalizada com")
        state.in_round = False
        state.buffer = []

    # -----------------------------
    # Helpers
    # -----------------------------

    @staticmethod
    def _last_checkpoint(buffer: Sequence[ClassifiedEvent]) -> Optional[ClassifiedEvent]:
        for ev in reversed(buffer):
            if ev.kind is EventKind.CHECKPOINT:
                return ev
        return None

    def _check_completeness(self, state: ScanState, when: datetime, prefix: str) -> None:
        checkpoints = [e for e in state.buffer if e.kind is EventKind.CHECKPOINT]
        total = self.settings.total_locations
        if len(checkpoints) >= total:
            return

        details = f"{prefix} {len(checkpoints)} de {total} locais."
        if checkpoints:
            details += f" Último local: #{checkpoints[-1].checkpoint_number}."
        else:
            details += " Nenhum local foi visitado."

        self._emit(state, NonConformityKind.INCOMPLETE_ROUND, when, details, list(state.buffer))

    @staticmethod
    def _emit(
        state: ScanState,
        kind: NonConformityKind,
        when: datetime,
        details: str,
        events: Sequence[ClassifiedEvent],
    ) -> None:
        state.ordinal += 1
        state.found.append(
            NonConformity(
                id=f"{when.isoformat()}-{kind.name}-{state.ordinal}",
                timestamp=when,
                guard=state.current_guard,
                kind=kind,
                details=details,
                associated_events=tuple(events),
            )
        )
