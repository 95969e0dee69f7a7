from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from domain.events import ClassifiedEvent, EventKind, RawEvent
from domain.settings import KNOWN_GUARDS

ROUND_START_PHRASE = "INICIO RONDA PORTARIA"
DISCHARGE_PHRASE = "DESCARGA DE COLETOR EFETUADA"

CHECKPOINT_RE = re.compile(r"LOCAL\s*(\d+)|(\d+)\s*LOCAL")

# (texto em maiúsculas, evento) -> ClassifiedEvent | None
Rule = Callable[[str, RawEvent], Optional[ClassifiedEvent]]


def _round_start(upper: str, raw: RawEvent) -> Optional[ClassifiedEvent]:
    if ROUND_START_PHRASE in upper:
        return ClassifiedEvent.from_raw(raw, EventKind.ROUND_START)
    return None


def _discharge(upper: str, raw: RawEvent) -> Optional[ClassifiedEvent]:
    if DISCHARGE_PHRASE in upper:
        return ClassifiedEvent.from_raw(raw, EventKind.COLLECTOR_DISCHARGE)
    return None


def _guard(roster: Sequence[str]) -> Rule:
    names = frozenset(roster)

    def rule(upper: str, raw: RawEvent) -> Optional[ClassifiedEvent]:
        name = upper.strip()
        if name in names:
            return ClassifiedEvent.from_raw(raw, EventKind.GUARD_IDENTIFIED, guard_name=name)
        return None

    return rule


def _checkpoint(upper: str, raw: RawEvent) -> Optional[ClassifiedEvent]:
    m = CHECKPOINT_RE.search(upper)
    if not m:
        return None
    number = int(m.group(1) or m.group(2))
    return ClassifiedEvent.from_raw(raw, EventKind.CHECKPOINT, checkpoint_number=number)


def build_rules(guards: Iterable[str] = KNOWN_GUARDS) -> Tuple[Rule, ...]:
    """
    Ordem de prioridade fixa (a primeira regra que casar vence).
    """
    roster = tuple(str(g).strip().upper() for g in guards)
    return (
        _round_start,
        _discharge,
        _guard(roster),
        _checkpoint,
    )


def classify_event(raw: RawEvent, rules: Sequence[Rule]) -> ClassifiedEvent:
    upper = raw.text.upper()
    for rule in rules:
        ev = rule(upper, raw)
        if ev is not None:
            return ev
    return ClassifiedEvent.from_raw(raw, EventKind.UNKNOWN)


def classify(events: Iterable[RawEvent], guards: Iterable[str] = KNOWN_GUARDS) -> List[ClassifiedEvent]:
    rules = build_rules(guards)
    return [classify_event(raw, rules) for raw in events]
