from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from numbers import Real
from typing import Any, Literal, Mapping, Tuple

from .errors import SettingsError

DateOrder = Literal["MDY", "DMY"]

KNOWN_GUARDS: Tuple[str, ...] = (
    "JOÃO", "ROBSON", "MATIAS", "EDUARDO", "CARLOS", "FERNANDO", "MARCOS", "PAULO",
)

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def _clock_minutes(text: str, path: str) -> int:
    m = _CLOCK_RE.match(str(text).strip()) if text is not None else None
    if not m:
        raise SettingsError(f"Config inválida: '{path}' deve estar no formato HH:MM (recebido {text!r}).")
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 23 or mm > 59:
        raise SettingsError(f"Config inválida: '{path}' fora do relógio de 24h ({text!r}).")
    return hh * 60 + mm


@dataclass(frozen=True)
class DinnerInterval:
    start: str
    end: str

    def __post_init__(self) -> None:
        _clock_minutes(self.start, "dinner_intervals.start")
        _clock_minutes(self.end, "dinner_intervals.end")

    @property
    def start_minutes(self) -> int:
        return _clock_minutes(self.start, "dinner_intervals.start")

    @property
    def end_minutes(self) -> int:
        return _clock_minutes(self.end, "dinner_intervals.end")

    def covers(self, when: datetime) -> bool:
        """
        Só olha o relógio (HH:MM) do evento; os limites são inclusivos.
        end < start => janela atravessa a meia-noite (ex.: 23:00 -> 01:00).
        """
        t = when.hour * 60 + when.minute
        start, end = self.start_minutes, self.end_minutes
        if end < start:
            return t >= start or t <= end
        return start <= t <= end


DEFAULT_DINNER_INTERVALS: Tuple[DinnerInterval, ...] = (DinnerInterval("23:00", "23:30"),)


def _positive_number(x: Any, path: str) -> float:
    if isinstance(x, bool) or not isinstance(x, Real) or not math.isfinite(x) or x <= 0:
        raise SettingsError(f"Config inválida: '{path}' deve ser um número > 0 (recebido {x!r}).")
    return x


def _non_negative_number(x: Any, path: str) -> float:
    if isinstance(x, bool) or not isinstance(x, Real) or not math.isfinite(x) or x < 0:
        raise SettingsError(f"Config inválida: '{path}' deve ser um número >= 0 (recebido {x!r}).")
    return x


@dataclass(frozen=True)
class AuditSettings:
    """
    Regras operacionais usadas na auditoria.

    round_start_tolerance_minutes / round_end_tolerance_minutes ficam na
    configuração, mas nenhuma regra os consome ainda.
    """
    total_locations: int
    max_interval_minutes: float = 10
    dinner_intervals: Tuple[DinnerInterval, ...] = DEFAULT_DINNER_INTERVALS
    round_start_tolerance_minutes: float = 5
    round_end_tolerance_minutes: float = 5

    date_order: DateOrder = "MDY"
    guards: Tuple[str, ...] = field(default=KNOWN_GUARDS)

    def __post_init__(self) -> None:
        _positive_number(self.max_interval_minutes, "max_interval_minutes")
        if (
            isinstance(self.total_locations, bool)
            or not isinstance(self.total_locations, int)
            or self.total_locations <= 0
        ):
            raise SettingsError(
                f"Config inválida: 'total_locations' deve ser inteiro > 0 (recebido {self.total_locations!r})."
            )
        _non_negative_number(self.round_start_tolerance_minutes, "round_start_tolerance_minutes")
        _non_negative_number(self.round_end_tolerance_minutes, "round_end_tolerance_minutes")

        if self.date_order not in ("MDY", "DMY"):
            raise SettingsError(f"Config inválida: 'date_order' deve ser MDY ou DMY (recebido {self.date_order!r}).")

        for i, di in enumerate(self.dinner_intervals):
            if not isinstance(di, DinnerInterval):
                raise SettingsError(f"Config inválida: 'dinner_intervals[{i}]' não é um DinnerInterval.")

        if isinstance(self.guards, (str, bytes)) or not isinstance(self.guards, (list, tuple)):
            raise SettingsError(f"Config inválida: 'guards' deve ser uma lista de nomes (recebido {self.guards!r}).")

        # roster normalizado em maiúsculas (a comparação no classificador é exata)
        guards = tuple(str(g).strip().upper() for g in self.guards)
        if any(not g for g in guards):
            raise SettingsError("Config inválida: 'guards' contém nome vazio.")
        object.__setattr__(self, "guards", guards)
        object.__setattr__(self, "dinner_intervals", tuple(self.dinner_intervals))

    def is_dinner_time(self, when: datetime) -> bool:
        return any(di.covers(when) for di in self.dinner_intervals)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AuditSettings":
        """
        Aceita as chaves em snake_case e, por compatibilidade com o painel
        antigo, em camelCase (maxIntervalMinutes, totalLocations, ...).
        """
        if not isinstance(data, Mapping):
            raise SettingsError("Config inválida: settings deve ser um mapa (dict).")

        def pick(name: str, alias: str, default: Any) -> Any:
            if name in data:
                return data[name]
            return data.get(alias, default)

        total = pick("total_locations", "totalLocations", None)
        if total is None:
            raise SettingsError("Config inválida: campo obrigatório 'total_locations' ausente.")

        raw_intervals = pick("dinner_intervals", "dinnerIntervals", None)
        if raw_intervals is None:
            intervals = DEFAULT_DINNER_INTERVALS
        else:
            intervals = to_dinner_intervals(raw_intervals, "dinner_intervals")

        return cls(
            total_locations=total,
            max_interval_minutes=pick("max_interval_minutes", "maxIntervalMinutes", 10),
            dinner_intervals=intervals,
            round_start_tolerance_minutes=pick("round_start_tolerance_minutes", "roundStartToleranceMinutes", 5),
            round_end_tolerance_minutes=pick("round_end_tolerance_minutes", "roundEndToleranceMinutes", 5),
            date_order=str(pick("date_order", "dateOrder", "MDY")).upper(),  # type: ignore[arg-type]
            guards=to_guards(data["guards"], "guards") if "guards" in data else KNOWN_GUARDS,
        )


def to_dinner_intervals(x: Any, path: str) -> Tuple[DinnerInterval, ...]:
    """
    Espera:
      dinner_intervals:
        - start: "22:00"
          end: "23:00"
        - start: "23:30"
          end: "00:30"   # atravessa a meia-noite
    """
    if not isinstance(x, (list, tuple)):
        raise SettingsError(f"Config inválida: '{path}' deve ser uma lista de janelas.")

    out = []
    for i, item in enumerate(x):
        if isinstance(item, DinnerInterval):
            out.append(item)
            continue
        if not isinstance(item, Mapping):
            raise SettingsError(f"Config inválida: '{path}[{i}]' deve ser um objeto com start/end.")
        start, end = item.get("start"), item.get("end")
        if start is None or end is None:
            raise SettingsError(f"Config inválida: '{path}[{i}]' precisa de start e end.")
        out.append(DinnerInterval(start=_clock_text(start), end=_clock_text(end)))
    return tuple(out)


def _clock_text(x: Any) -> str:
    # PyYAML (YAML 1.1) lê 23:00 sem aspas como sexagesimal (1380)
    if isinstance(x, int) and not isinstance(x, bool):
        return f"{x // 60:02d}:{x % 60:02d}"
    return str(x)


def to_guards(x: Any, path: str) -> Tuple[str, ...]:
    # string solta viraria roster de letras ("PAULO" -> P, A, U, L, O)
    if not isinstance(x, (list, tuple)):
        raise SettingsError(f"Config inválida: '{path}' deve ser uma lista de nomes (recebido {x!r}).")
    return tuple(str(g) for g in x)
