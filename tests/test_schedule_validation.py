"""Testes da checagem de sobreposição da disponibilidade semanal."""

from itertools import permutations

import pytest

from schedulizer.core.schedule_validation import (
    ScheduleConflict,
    find_schedule_conflict,
    minutes_to_time,
    time_to_minutes,
)
from schedulizer.models.schedule import DayScheduleInput, PeriodInput


def _day(day_of_week, *periods, is_active=True):
    return DayScheduleInput(
        day_of_week=day_of_week,
        is_active=is_active,
        periods=[PeriodInput(start_time=s, end_time=e) for s, e in periods],
    )


def test_separate_periods_have_no_conflict():
    assert find_schedule_conflict([_day(1, ("08:00", "12:00"), ("14:00", "18:00"))]) is None


def test_overlapping_periods_report_the_day():
    conflict = find_schedule_conflict([_day(1, ("08:00", "13:00"), ("12:00", "18:00"))])
    assert conflict == ScheduleConflict(day_of_week=1)


def test_inactive_day_without_periods():
    assert find_schedule_conflict([_day(0, is_active=False)]) is None


def test_unsorted_overlap_is_detected():
    conflict = find_schedule_conflict([_day(4, ("14:00", "18:00"), ("08:00", "15:00"))])
    assert conflict is not None
    assert conflict.day_of_week == 4


def test_flags_the_bad_day_not_the_good_one():
    conflict = find_schedule_conflict([
        _day(1, ("08:00", "12:00"), ("13:00", "18:00")),
        _day(2, ("08:00", "14:00"), ("13:00", "18:00")),
    ])
    assert conflict.day_of_week == 2


def test_adjacent_periods_are_not_an_overlap():
    assert find_schedule_conflict([_day(3, ("08:00", "12:00"), ("12:00", "18:00"))]) is None


def test_zero_or_one_period_never_conflicts():
    assert find_schedule_conflict([_day(5), _day(6, ("00:00", "23:59"))]) is None


def test_empty_input():
    assert find_schedule_conflict([]) is None


def test_identical_periods_conflict():
    conflict = find_schedule_conflict([_day(2, ("09:00", "10:00"), ("09:00", "10:00"))])
    assert conflict.day_of_week == 2


def test_contained_period_conflicts():
    conflict = find_schedule_conflict([_day(2, ("08:00", "18:00"), ("10:00", "11:00"))])
    assert conflict.day_of_week == 2


def test_order_of_periods_does_not_change_verdict():
    ok = [("08:00", "09:00"), ("09:00", "10:30"), ("11:00", "12:00")]
    bad = [("08:00", "09:00"), ("08:30", "10:30"), ("11:00", "12:00")]
    for perm in permutations(ok):
        assert find_schedule_conflict([_day(1, *perm)]) is None
    for perm in permutations(bad):
        assert find_schedule_conflict([_day(1, *perm)]).day_of_week == 1


def test_other_days_do_not_mask_an_overlap():
    bad_day = _day(3, ("10:00", "12:00"), ("11:00", "13:00"))
    assert find_schedule_conflict([bad_day]).day_of_week == 3
    assert find_schedule_conflict([_day(0, ("10:00", "12:00")), bad_day]).day_of_week == 3
    assert find_schedule_conflict([bad_day, _day(5, ("10:00", "12:00"))]).day_of_week == 3


def test_first_conflicting_day_in_input_order_wins():
    day5 = _day(5, ("08:00", "10:00"), ("09:00", "11:00"))
    day3 = _day(3, ("08:00", "10:00"), ("09:00", "11:00"))
    assert find_schedule_conflict([day5, day3]).day_of_week == 5
    assert find_schedule_conflict([day3, day5]).day_of_week == 3


@pytest.mark.parametrize(
    "a, b, overlaps",
    [
        (("08:00", "10:00"), ("09:59", "11:00"), True),
        (("08:00", "10:00"), ("10:00", "11:00"), False),
        (("08:00", "10:00"), ("10:01", "11:00"), False),
        (("08:00", "23:59"), ("23:00", "23:30"), True),
    ],
)
def test_pair_overlaps_iff_later_start_before_earlier_end(a, b, overlaps):
    conflict = find_schedule_conflict([_day(1, a, b)])
    assert (conflict is not None) is overlaps


def test_accepts_plain_dicts():
    schedules = [
        {
            "day_of_week": 6,
            "periods": [
                {"start_time": "10:00", "end_time": "12:00"},
                {"start_time": "11:30", "end_time": "13:00"},
            ],
        }
    ]
    assert find_schedule_conflict(schedules).day_of_week == 6


def test_conflict_message_names_the_day():
    assert "dia 2" in ScheduleConflict(day_of_week=2).message
    assert "domingo" in ScheduleConflict(day_of_week=0).message


def test_time_helpers():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("08:30") == 510
    assert time_to_minutes("23:59") == 1439
    assert minutes_to_time(510) == "08:30"
    assert minutes_to_time(0) == "00:00"
