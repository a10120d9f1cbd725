import calendar
import math
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta

INVALID_DATE = "Invalid date"


@dataclass
class StreakSummary:
    current_streak: int
    journaled_today: bool
    consistency: int
    longest_streak: int
    total_entries: int
    average_mood: float
    consistency_message: str

    def to_dict(self):
        return asdict(self)


def _created_at(entry):
    if isinstance(entry, dict):
        return entry.get("created_at", entry.get("createdAt"))
    return getattr(entry, "created_at", None)


def entry_day(value):
    """Calendar day of a timestamp, or None when it cannot be parsed."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def journal_days(entries):
    """Distinct journaling days, newest first."""
    days = {entry_day(_created_at(e)) for e in entries or []}
    days.discard(None)
    return sorted(days, reverse=True)


def current_streak(days, today):
    if not days:
        return 0
    day_set = set(days)
    yesterday = today - timedelta(days=1)
    if today in day_set:
        cursor = today
    elif yesterday in day_set:
        # not journaled yet today, the run ending yesterday is still alive
        cursor = yesterday
    else:
        return 0
    streak = 0
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days):
    if not days:
        return 0
    ordered = sorted(set(days))
    best = current = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if curr == prev + timedelta(days=1):
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


def monthly_consistency(days, today):
    """Share of this month's days with an entry, as a 0-100 integer."""
    if not days:
        return 0
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    journaled = sum(1 for d in set(days) if d.year == today.year and d.month == today.month)
    pct = math.floor(journaled * 100 / days_in_month + 0.5)
    return max(0, min(100, pct))


def consistency_message(pct):
    if pct >= 80:
        return "Amazing consistency! Keep it up!"
    if pct >= 50:
        return "Good progress! Try to journal more regularly"
    return "Let's build that habit! Every day counts"


def _average_mood(entries):
    if not entries:
        return 0.0
    scores = []
    for e in entries:
        score = e.get("sentiment_score") if isinstance(e, dict) else getattr(e, "sentiment_score", None)
        scores.append(score if score is not None else 5)
    return round(sum(scores) / len(scores), 1)


def calculate_streak(entries, today=None):
    """Streak, today's status and monthly consistency for a user's entries."""
    entries = list(entries or [])
    today = today or date.today()
    days = journal_days(entries)
    pct = monthly_consistency(days, today)
    return StreakSummary(
        current_streak=current_streak(days, today),
        journaled_today=today in days,
        consistency=pct,
        longest_streak=longest_streak(days),
        total_entries=len(entries),
        average_mood=_average_mood(entries),
        consistency_message=consistency_message(pct),
    )


def month_calendar(entries, today=None):
    today = today or date.today()
    day_set = set(journal_days(entries))
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    rows = []
    for n in range(1, days_in_month + 1):
        d = date(today.year, today.month, n)
        rows.append({
            "date": d.isoformat(),
            "day": n,
            "has_entry": d in day_set,
            "is_today": d == today,
        })
    return rows


def format_entry_date(value):
    day = entry_day(value)
    if day is None:
        return INVALID_DATE
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"
