from datetime import date, datetime

import pytest

from src.team_attendance.team_attendance.core.enums import RecurrenceFrequency
from src.team_attendance.team_attendance.core.exceptions import ValidationError
from src.team_attendance.team_attendance.recurrence.expander import RecurrenceExpander, build_rule, expand
from src.team_attendance.team_attendance.recurrence.factory import RecurrenceStrategyFactory
from src.team_attendance.team_attendance.recurrence.model import decode_weekdays, encode_weekdays
from src.team_attendance.team_attendance.recurrence.strategies.biweekly_strategy import BiweeklyStrategy
from src.team_attendance.team_attendance.recurrence.strategies.monthly_strategy import MonthlyStrategy

SUN, MON, TUE, WED, THU, FRI, SAT = range(7)


def test_daily_includes_both_ends():
    assert expand("2026-03-01", "2026-03-05", "DAILY") == [date(2026, 3, d) for d in range(1, 6)]


def test_daily_single_day_range():
    assert expand(date(2026, 3, 1), date(2026, 3, 1), RecurrenceFrequency.DAILY) == [date(2026, 3, 1)]


def test_weekly_selects_requested_weekdays_in_order():
    dates = expand("2026-03-01", "2026-03-14", "WEEKLY", [WED, MON])
    assert dates == [date(2026, 3, 2), date(2026, 3, 4), date(2026, 3, 9), date(2026, 3, 11)]


def test_biweekly_keeps_even_weeks_from_the_start_week():
    # 2026-03-01 is a Sunday, so it anchors week 0
    dates = expand("2026-03-01", "2026-03-31", "BIWEEKLY", [TUE])
    assert dates == [date(2026, 3, 3), date(2026, 3, 17), date(2026, 3, 31)]


def test_biweekly_anchor_is_the_sunday_before_a_midweek_start():
    dates = expand("2026-03-04", "2026-03-21", "BIWEEKLY", [MON, FRI])
    # Monday 2 March is before the start; week of 8 March is skipped
    assert dates == [date(2026, 3, 6), date(2026, 3, 16), date(2026, 3, 20)]


def test_monthly_skips_months_without_the_day():
    dates = expand("2026-01-31", "2026-05-31", "MONTHLY")
    assert dates == [date(2026, 1, 31), date(2026, 3, 31), date(2026, 5, 31)]


def test_monthly_stops_at_end_date():
    assert expand("2026-01-15", "2026-03-14", "MONTHLY") == [date(2026, 1, 15), date(2026, 2, 15)]


def test_monthly_day_thirty_skips_february():
    assert MonthlyStrategy().dates(build_rule("2024-01-30", "2024-03-30", "MONTHLY")) == [date(2024, 1, 30), date(2024, 3, 30)]


def test_late_evening_datetime_is_reduced_to_its_calendar_date():
    dates = expand(datetime(2026, 3, 1, 23, 30), datetime(2026, 3, 2, 0, 15), "DAILY")
    assert dates == [date(2026, 3, 1), date(2026, 3, 2)]


def test_expansion_is_sorted_and_unique():
    dates = expand("2026-01-01", "2026-12-31", "WEEKLY", [SAT, SUN, WED])
    assert dates == sorted(set(dates))
    assert all(date(2026, 1, 1) <= d <= date(2026, 12, 31) for d in dates)


def test_factory_returns_biweekly_strategy():
    assert isinstance(RecurrenceStrategyFactory().for_frequency(RecurrenceFrequency.BIWEEKLY), BiweeklyStrategy)


def test_unknown_frequency_is_rejected():
    with pytest.raises(ValidationError):
        build_rule("2026-03-01", "2026-03-02", "YEARLY")


@pytest.mark.parametrize(
    "start,end,frequency,weekdays,message",
    [
        ("2026-03-10", "2026-03-01", "DAILY", None, "End date must be on or after start date"),
        ("2026-03-01", "2026-03-10", "WEEKLY", [], "Days of week are required"),
        ("2026-03-01", "2026-03-10", "BIWEEKLY", None, "Days of week are required"),
        ("2026-03-01", "2026-03-10", "WEEKLY", [7], "Weekdays must be between 0"),
    ],
)
def test_expand_checked_rejects_invalid_rules(start, end, frequency, weekdays, message):
    with pytest.raises(ValidationError, match=message):
        RecurrenceExpander().expand_checked(build_rule(start, end, frequency, weekdays))


def test_expand_checked_rejects_empty_result():
    # Tuesday to Saturday never hits a Monday
    rule = build_rule("2026-03-03", "2026-03-07", "WEEKLY", [MON])
    assert RecurrenceExpander().expand(rule) == []
    with pytest.raises(ValidationError, match="No event occurrences generated"):
        RecurrenceExpander().expand_checked(rule)


def test_expand_checked_enforces_the_cap():
    expander = RecurrenceExpander(max_occurrences=3)
    with pytest.raises(ValidationError, match=r"Too many occurrences \(5, max 3\)"):
        expander.expand_checked(build_rule("2026-03-01", "2026-03-05", "DAILY"))
    assert len(expander.expand_checked(build_rule("2026-03-01", "2026-03-03", "DAILY"))) == 3


def test_weekdays_round_trip_through_storage_format():
    assert encode_weekdays({5, 1, 3}) == "1,3,5"
    assert decode_weekdays("1,3,5") == frozenset({1, 3, 5})
    assert decode_weekdays(None) == frozenset()
