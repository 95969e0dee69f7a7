from datetime import datetime

import pytest

from domain.errors import SettingsError
from domain.settings import KNOWN_GUARDS, AuditSettings, DinnerInterval, to_dinner_intervals


def test_defaults() -> None:
    s = AuditSettings(total_locations=5)
    assert s.max_interval_minutes == 10
    assert s.date_order == "MDY"
    assert s.guards == KNOWN_GUARDS
    assert s.dinner_intervals == (DinnerInterval("23:00", "23:30"),)
    # tolerâncias ficam na configuração sem regra associada
    assert s.round_start_tolerance_minutes == 5
    assert s.round_end_tolerance_minutes == 5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"total_locations": 0},
        {"total_locations": 2.5},
        {"total_locations": True},
        {"total_locations": 3, "max_interval_minutes": 0},
        {"total_locations": 3, "round_start_tolerance_minutes": -1},
        {"total_locations": 3, "date_order": "YMD"},
        {"total_locations": 3, "guards": ("ROBSON", " ")},
        {"total_locations": 3, "guards": "ROBSON"},
        {"total_locations": 3, "max_interval_minutes": float("nan")},
        {"total_locations": 3, "round_start_tolerance_minutes": float("inf")},
    ],
)
def test_invalid_values(kwargs: dict) -> None:
    with pytest.raises(SettingsError):
        AuditSettings(**kwargs)


@pytest.mark.parametrize("start,end", [("24:00", "01:00"), ("22:60", "23:00"), ("abc", "23:00"), ("", "1:00")])
def test_malformed_dinner_interval(start: str, end: str) -> None:
    with pytest.raises(SettingsError):
        DinnerInterval(start, end)


def test_dinner_interval_same_day_bounds_are_inclusive() -> None:
    di = DinnerInterval("22:00", "23:00")
    assert di.covers(datetime(2025, 1, 1, 22, 0))
    assert di.covers(datetime(2025, 1, 1, 23, 0, 59))
    assert not di.covers(datetime(2025, 1, 1, 23, 1))
    assert not di.covers(datetime(2025, 1, 1, 21, 59))


def test_dinner_interval_wraps_midnight() -> None:
    di = DinnerInterval("23:00", "01:00")
    assert di.covers(datetime(2025, 1, 1, 23, 30))
    assert di.covers(datetime(2025, 1, 2, 0, 45))
    assert not di.covers(datetime(2025, 1, 2, 1, 1))
    assert not di.covers(datetime(2025, 1, 1, 12, 0))


def test_guards_are_normalized() -> None:
    s = AuditSettings(total_locations=1, guards=("ana", " Bia "))
    assert s.guards == ("ANA", "BIA")


def test_to_dinner_intervals_accepts_yaml_sexagesimal() -> None:
    intervals = to_dinner_intervals([{"start": 1380, "end": "00:30"}], "dinner_intervals")
    assert intervals == (DinnerInterval("23:00", "00:30"),)

    with pytest.raises(SettingsError):
        to_dinner_intervals([{"start": "23:00"}], "dinner_intervals")
    with pytest.raises(SettingsError):
        to_dinner_intervals("23:00-23:30", "dinner_intervals")
