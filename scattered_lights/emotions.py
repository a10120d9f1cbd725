import math

from scattered_lights.streaks import entry_day

EMOTION_KEYS = [
    "joy",
    "sadness",
    "anger",
    "fear",
    "love",
    "surprise",
    "guilt",
    "shame",
    "peace",
    "confusion",
]

PERIODS = ("day", "week", "month")
SOURCES = ("journal", "chat", "tracking")


def empty_emotions():
    return {key: 0 for key in EMOTION_KEYS}


def _score(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    # clamp before rounding so infinities stay in range
    return int(round(max(0.0, min(100.0, number))))


def normalize_emotions(raw):
    """Standard emotions zero-filled, every score coerced into 0-100."""
    emotions = empty_emotions()
    for label, value in (raw or {}).items():
        emotions[str(label).lower()] = _score(value)
    return emotions


def tracking_sample(label, intensity):
    """Scores for a single tracked emotion of intensity 1-10."""
    return normalize_emotions({label: int(intensity) * 10})


def period_key(day, period):
    """Bucket label plus a sort key for a calendar day."""
    if period == "day":
        return day.isoformat(), (day.year, day.month, day.day)
    if period == "week":
        first = day.replace(day=1)
        first_weekday = (first.weekday() + 1) % 7  # Sunday=0
        week = math.ceil((day.day + first_weekday) / 7)
        return f"{day.year}-{day.month}-W{week}", (day.year, day.month, week)
    if period == "month":
        return f"{day.year:04d}-{day.month:02d}", (day.year, day.month, 0)
    raise ValueError(f"Invalid period {period!r}, must be one of {', '.join(PERIODS)}")


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def aggregate_emotions(samples, period="day"):
    """Average per-emotion scores per period, oldest period first.

    Each sample is a mapping with ``emotions`` ({label: score}), a timestamp
    under ``date`` or ``created_at`` and an optional ``source``.
    """
    if period not in PERIODS:
        raise ValueError(f"Invalid period {period!r}, must be one of {', '.join(PERIODS)}")

    labels = list(EMOTION_KEYS)
    buckets = {}
    for sample in samples or []:
        day = entry_day(sample.get("date") or sample.get("created_at"))
        if day is None:
            continue
        emotions = sample.get("emotions") or {}
        for label in emotions:
            label = str(label).lower()
            if label not in labels:
                labels.append(label)
        key, sort_key = period_key(day, period)
        bucket = buckets.setdefault(key, {"sort_key": sort_key, "samples": []})
        bucket["samples"].append(sample)

    result = []
    for key, bucket in sorted(buckets.items(), key=lambda kv: kv[1]["sort_key"]):
        group = bucket["samples"]
        totals = {label: 0 for label in labels}
        sources = {source: 0 for source in SOURCES}
        for sample in group:
            normalized = normalize_emotions(sample.get("emotions"))
            for label in labels:
                totals[label] += normalized.get(label, 0)
            source = sample.get("source")
            if source:
                sources[source] = sources.get(source, 0) + 1
        result.append({
            "period": key,
            "emotions": {label: _round_half_up(total / len(group)) for label, total in totals.items()},
            "count": len(group),
            "sources": sources,
        })
    return result
