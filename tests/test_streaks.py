from datetime import date, datetime

from scattered_lights.streaks import (
    INVALID_DATE,
    calculate_streak,
    entry_day,
    format_entry_date,
    longest_streak,
    month_calendar,
    monthly_consistency,
)

TODAY = date(2024, 3, 15)


def entries_on(*days):
    return [{"created_at": datetime(2024, 3, d, 9, 30)} for d in days]


def test_empty_history_has_no_streak() -> None:
    summary = calculate_streak([], today=TODAY)
    assert summary.current_streak == 0
    assert summary.consistency == 0
    assert summary.journaled_today is False
    assert summary.average_mood == 0.0
    assert summary.consistency_message == "Let's build that habit! Every day counts"


def test_single_entry_today_starts_streak() -> None:
    summary = calculate_streak(entries_on(15), today=TODAY)
    assert summary.current_streak == 1
    assert summary.journaled_today is True


def test_streak_still_alive_when_last_entry_was_yesterday() -> None:
    summary = calculate_streak(entries_on(14, 13, 12), today=TODAY)
    assert summary.current_streak == 3
    assert summary.journaled_today is False


def test_gap_before_yesterday_breaks_streak() -> None:
    assert calculate_streak(entries_on(13, 12), today=TODAY).current_streak == 0


def test_several_entries_on_one_day_count_once() -> None:
    summary = calculate_streak(entries_on(15, 15, 15, 14), today=TODAY)
    assert summary.current_streak == 2
    assert summary.total_entries == 4


def test_future_entry_does_not_seed_streak() -> None:
    assert calculate_streak(entries_on(16), today=TODAY).current_streak == 0


def test_invalid_dates_are_skipped() -> None:
    entries = [{"created_at": "not a date"}, {"created_at": None}] + entries_on(15)
    summary = calculate_streak(entries, today=TODAY)
    assert summary.current_streak == 1
    assert summary.total_entries == 3


def test_iso_strings_with_z_suffix() -> None:
    assert entry_day("2024-03-15T23:30:00Z") == date(2024, 3, 15)
    assert entry_day("2024-03-15") == date(2024, 3, 15)
    assert entry_day("garbage") is None


def test_consistency_uses_whole_month() -> None:
    # March has 31 days
    days = [date(2024, 3, d) for d in range(1, 17)]
    assert monthly_consistency(days, TODAY) == 52

    summary = calculate_streak(entries_on(*range(1, 26)), today=date(2024, 3, 25))
    assert summary.consistency == 81
    assert summary.consistency_message == "Amazing consistency! Keep it up!"


def test_consistency_ignores_other_months() -> None:
    days = [date(2024, 2, d) for d in range(1, 29)]
    assert monthly_consistency(days, TODAY) == 0


def test_consistency_message_mid_band() -> None:
    summary = calculate_streak(entries_on(*range(1, 17)), today=TODAY)
    assert summary.consistency_message == "Good progress! Try to journal more regularly"


def test_longest_streak_anywhere_in_history() -> None:
    days = [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 10), date(2024, 1, 11)]
    assert longest_streak(days) == 3
    assert longest_streak([]) == 0


def test_average_mood_counts_missing_scores_as_five() -> None:
    entries = [
        {"created_at": datetime(2024, 3, 15), "sentiment_score": 8},
        {"created_at": datetime(2024, 3, 14), "sentiment_score": None},
    ]
    assert calculate_streak(entries, today=TODAY).average_mood == 6.5


def test_month_calendar_marks_entries_and_today() -> None:
    rows = month_calendar(entries_on(2, 15), today=TODAY)
    assert len(rows) == 31
    assert rows[14] == {"date": "2024-03-15", "day": 15, "has_entry": True, "is_today": True}
    assert rows[1]["has_entry"] is True
    assert rows[2]["has_entry"] is False


def test_format_entry_date() -> None:
    assert format_entry_date(date(2024, 3, 15)) == "Friday, March 15, 2024"
    assert format_entry_date("nope") == INVALID_DATE
