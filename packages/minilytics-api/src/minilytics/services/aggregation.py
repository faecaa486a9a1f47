"""Dashboard aggregation over raw page-view rows.

Every function here is pure: the result depends only on the events passed
in, the reference ``now`` and the window length. Calendar days are taken in
the time zone of ``now`` (the viewer's local calendar); naive timestamps
are read as UTC.
"""

import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Protocol

TOP_PATHS_LIMIT = 10
RECENT_LIMIT = 10


class EventLike(Protocol):
    created_at: datetime
    domain: str | None
    path: str | None


def local_day(moment: datetime, tz: tzinfo) -> date:
    """Return the calendar day of ``moment`` in ``tz``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def window_days(today: date, days: int) -> list[date]:
    """Return the ``days`` calendar days ending at ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def daily_counts(
    events: Iterable[EventLike], now: datetime, days: int
) -> list[tuple[date, int]]:
    """Bucket events per local calendar day over a trailing window.

    Events outside the window are dropped rather than clipped into the
    first or last bucket.
    """
    tz = now.tzinfo or timezone.utc
    buckets: dict[date, int] = {day: 0 for day in window_days(local_day(now, tz), days)}
    for event in events:
        day = local_day(event.created_at, tz)
        if day in buckets:
            buckets[day] += 1
    return list(buckets.items())


def count_today(events: Iterable[EventLike], now: datetime) -> int:
    tz = now.tzinfo or timezone.utc
    today = local_day(now, tz)
    return sum(1 for event in events if local_day(event.created_at, tz) == today)


def average_per_day(daily: Sequence[tuple[date, int]]) -> int:
    """Average views per day over the window, rounded half up.

    The numerator is the sum of the window's buckets, so the average always
    describes the selected window even when the fetched set spans more
    history.
    """
    if not daily:
        return 0
    return math.floor(sum(count for _, count in daily) / len(daily) + 0.5)


def top_paths(
    events: Iterable[EventLike], limit: int = TOP_PATHS_LIMIT
) -> list[tuple[str, str, int]]:
    """Rank (domain, path) pairs by frequency.

    Ties keep the order in which each pair was first seen: dicts preserve
    insertion order and ``sorted`` is stable.
    """
    counts: dict[tuple[str, str], int] = {}
    for event in events:
        key = (event.domain or "", event.path or "/")
        counts[key] = counts.get(key, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [(domain, path, count) for (domain, path), count in ranked[:limit]]


def summarize(events: Sequence[EventLike], now: datetime, days: int) -> dict:
    """Compute the full dashboard summary for an already-filtered event list.

    ``events`` is expected newest first, as the read path fetches them;
    ``recent`` is simply its head.
    """
    daily = daily_counts(events, now, days)
    return {
        "total": len(events),
        "today": count_today(events, now),
        "average_per_day": average_per_day(daily),
        "daily": [{"date": day, "views": count} for day, count in daily],
        "top_paths": [
            {"domain": domain, "path": path, "count": count}
            for domain, path, count in top_paths(events)
        ],
        "recent": list(events[:RECENT_LIMIT]),
    }
