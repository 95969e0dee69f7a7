from datetime import datetime, timedelta

import pytest

from app.pipeline import AuditPipeline, analyze
from domain.errors import SettingsError
from domain.models import AnalysisResult
from domain.nonconformities import NonConformityKind
from domain.settings import AuditSettings


def _perfect_log(n: int, start: datetime, gap_minutes: int = 5, guard: str = "PAULO") -> str:
    fmt = "%m/%d/%Y %H:%M"
    lines = [
        f"{start.strftime(fmt)} | INICIO RONDA PORTARIA",
        f"{start.strftime(fmt)} | {guard}",
    ]
    t = start
    for i in range(1, n + 1):
        t += timedelta(minutes=gap_minutes)
        lines.append(f"{t.strftime(fmt)} | LOCAL {i}")
    t += timedelta(minutes=gap_minutes)
    lines.append(f"{t.strftime(fmt)} | DESCARGA DE COLETOR EFETUADA")
    return "\n".join(lines)


@pytest.mark.parametrize("n", [1, 4, 12])
def test_perfect_log_has_no_non_conformities(n: int) -> None:
    text = _perfect_log(n, datetime(2025, 1, 15, 8, 0))
    result = analyze(text, AuditSettings(total_locations=n, max_interval_minutes=10))
    assert result.non_conformities == ()
    assert result.has_rounds is True
    assert result.counts_by_type == {}
    assert result.counts_by_guard == {}


def test_accepts_plain_mapping_settings() -> None:
    text = _perfect_log(3, datetime(2025, 1, 15, 8, 0))
    result = analyze(text, {"maxIntervalMinutes": 10, "totalLocations": 3, "dinnerIntervals": []})
    assert result.non_conformities == ()


@pytest.mark.parametrize(
    "settings",
    [
        {"total_locations": 0},
        {"total_locations": 3, "max_interval_minutes": 0},
        {"total_locations": 3, "max_interval_minutes": -5},
        {"total_locations": 3, "dinner_intervals": [{"start": "22h", "end": "23:00"}]},
        {"max_interval_minutes": 10},
        {"total_locations": 1, "guards": None},
        {"total_locations": 1, "guards": "PAULO"},
        {"total_locations": 3, "max_interval_minutes": float("nan")},
        {"total_locations": 3, "max_interval_minutes": float("inf")},
        {"total_locations": 3, "round_end_tolerance_minutes": float("nan")},
    ],
)
def test_invalid_settings_raise(settings: dict) -> None:
    with pytest.raises(SettingsError):
        analyze("01/15/2025 08:00 | INICIO RONDA PORTARIA", settings)


def test_no_patrol_data_is_distinguished_from_clean_log() -> None:
    result = analyze("isto não é um relatório\nnem isto", AuditSettings(total_locations=3))
    assert result.has_rounds is False
    assert result.is_empty_log


def test_is_idempotent() -> None:
    text = "\n".join([
        "01/15/2025 07:00 | LOCAL 3",
        "01/15/2025 08:00 | INICIO RONDA PORTARIA",
        "01/15/2025 08:00 | MARCOS",
        "01/15/2025 08:05 | LOCAL 1",
        "01/15/2025 08:50 | LOCAL 3",
        "01/15/2025 09:00 | INICIO RONDA PORTARIA",
        "01/15/2025 09:05 | LOCAL 1",
    ])
    settings = AuditSettings(total_locations=3)

    def tuples(result: AnalysisResult) -> list:
        return sorted(
            (nc.kind.name, nc.timestamp, nc.guard, nc.details) for nc in result.non_conformities
        )

    assert tuples(analyze(text, settings)) == tuples(analyze(text, settings))


def test_counts_sorted_descending() -> None:
    text = "\n".join([
        "01/15/2025 07:00 | LOCAL 1",
        "01/15/2025 07:01 | LOCAL 2",
        "01/15/2025 08:00 | INICIO RONDA PORTARIA",
        "01/15/2025 08:00 | FERNANDO",
        "01/15/2025 08:05 | LOCAL 1",
        "01/15/2025 08:10 | LOCAL 3",
        "01/15/2025 08:15 | DESCARGA DE COLETOR EFETUADA",
    ])
    result = analyze(text, AuditSettings(total_locations=3))
    assert list(result.counts_by_type.items()) == [
        (NonConformityKind.ROUND_NOT_STARTED, 2),
        (NonConformityKind.SEQUENCE_INCORRECT, 1),
        (NonConformityKind.INCOMPLETE_ROUND, 1),
    ]
    assert list(result.counts_by_guard.items()) == [("Desconhecido", 2), ("FERNANDO", 2)]


def test_pipeline_forwards_to_sinks() -> None:
    class Collect:
        def __init__(self) -> None:
            self.items: list = []

        def handle(self, result) -> None:
            self.items.append(result)

        def publish(self, nc) -> None:
            self.items.append(nc)

    sink, export = Collect(), Collect()
    pipeline = AuditPipeline({"total_locations": 2}, sink=sink, export_sink=export)
    result = pipeline.run("01/15/2025 08:00 | LOCAL 1")

    assert sink.items == [result]
    assert export.items == list(result.non_conformities)
    assert len(export.items) == 1


def test_mapping_roster_identifies_listed_guard() -> None:
    text = "\n".join([
        "01/15/2025 08:00 | INICIO RONDA PORTARIA",
        "01/15/2025 08:00 | Ana",
    ])
    result = analyze(text, {"total_locations": 1, "guards": ["ana"]})
    assert {nc.guard for nc in result.non_conformities} == {"ANA"}
