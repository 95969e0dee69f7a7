from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from domain.errors import SettingsError
from domain.settings import KNOWN_GUARDS, AuditSettings, DEFAULT_DINNER_INTERVALS, to_dinner_intervals, to_guards


@dataclass(frozen=True)
class ExportConfig:
    csv_path: str = "nao_conformidades.csv"
    flush_every_n: int = 200


@dataclass(frozen=True)
class ReportConfig:
    top_n: int = 10


@dataclass(frozen=True)
class AppConfig:
    audit: AuditSettings

    report: ReportConfig = ReportConfig()
    export: ExportConfig | None = None


def _req(d: Mapping[str, Any], path: str) -> Any:
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            raise SettingsError(f"Config inválida: campo obrigatório '{path}' ausente.")
        cur = cur[part]
    return cur


def _opt(d: Mapping[str, Any], path: str, default: Any) -> Any:
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return default
        cur = cur[part]
    return cur


def _to_number(x: Any, path: str) -> float:
    if isinstance(x, bool):
        raise SettingsError(f"Config inválida: '{path}' deve ser numérico: {x!r}")
    try:
        v = float(x)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Config inválida: '{path}' deve ser numérico: {x!r}") from e
    return int(v) if v.is_integer() else v


def _to_int(x: Any, path: str) -> int:
    # 3.7 não vira 3; .nan e .inf também são recusados
    if isinstance(x, bool) or (isinstance(x, float) and not x.is_integer()):
        raise SettingsError(f"Config inválida: '{path}' deve ser inteiro: {x!r}")
    try:
        return int(x)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Config inválida: '{path}' deve ser inteiro: {x!r}") from e


def parse_audit(data: Mapping[str, Any]) -> AuditSettings:
    """
    Espera:
      audit:
        total_locations: 12
        max_interval_minutes: 10
        date_order: MDY          # MDY (padrão) ou DMY
        dinner_intervals:
          - start: "23:00"
            end: "23:30"
        round_start_tolerance_minutes: 5
        round_end_tolerance_minutes: 5
        guards: [JOÃO, ROBSON]   # opcional
    """
    total = _to_int(_req(data, "audit.total_locations"), "audit.total_locations")
    max_interval = _to_number(_opt(data, "audit.max_interval_minutes", 10), "audit.max_interval_minutes")

    raw_intervals = _opt(data, "audit.dinner_intervals", None)
    intervals = (
        DEFAULT_DINNER_INTERVALS
        if raw_intervals is None
        else to_dinner_intervals(raw_intervals, "audit.dinner_intervals")
    )

    return AuditSettings(
        total_locations=total,
        max_interval_minutes=max_interval,
        dinner_intervals=intervals,
        round_start_tolerance_minutes=_to_number(
            _opt(data, "audit.round_start_tolerance_minutes", 5), "audit.round_start_tolerance_minutes"
        ),
        round_end_tolerance_minutes=_to_number(
            _opt(data, "audit.round_end_tolerance_minutes", 5), "audit.round_end_tolerance_minutes"
        ),
        date_order=str(_opt(data, "audit.date_order", "MDY")).upper(),  # type: ignore[arg-type]
        guards=to_guards(_opt(data, "audit.guards", KNOWN_GUARDS), "audit.guards"),
    )


def load_config(path: str = "config.yaml") -> AppConfig:
    p = Path(path)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        raise SettingsError(f"Config inválida: '{path}' deve conter um mapa YAML.")

    audit = parse_audit(data)

    # ---- report (opcional) ----
    report = ReportConfig(top_n=_to_int(_opt(data, "report.top_n", 10), "report.top_n"))

    # ---- export (opcional) ----
    ex_raw = _opt(data, "export", None)
    export = None

    if isinstance(ex_raw, Mapping) and bool(_opt(ex_raw, "enabled", True)):
        export = ExportConfig(
            csv_path=str(_opt(ex_raw, "csv_path", "nao_conformidades.csv")),
            flush_every_n=_to_int(_opt(ex_raw, "flush_every_n", 200), "export.flush_every_n"),
        )

    return AppConfig(audit=audit, report=report, export=export)
