from __future__ import annotations

from typing import Iterable, Sequence

from domain.events import ClassifiedEvent, EventKind
from domain.models import AnalysisResult, CountTable
from domain.nonconformities import NonConformity


def aggregate(
    non_conformities: Sequence[NonConformity],
    events: Iterable[ClassifiedEvent],
) -> AnalysisResult:
    by_type = CountTable()
    by_guard = CountTable()
    for nc in non_conformities:
        by_type.add(nc.kind)
        by_guard.add(nc.guard)

    # "relatório limpo" != "relatório sem rondas"
    has_rounds = any(ev.kind is EventKind.ROUND_START for ev in events)

    return AnalysisResult(
        non_conformities=tuple(non_conformities),
        counts_by_type=by_type.ranked(),  # type: ignore[arg-type]
        counts_by_guard=by_guard.ranked(),  # type: ignore[arg-type]
        has_rounds=has_rounds,
    )
