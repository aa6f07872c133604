"""Activity trend buckets: completion counts per day, week or month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Mapping

from .dates import add_months, month_start
from .schedule import weekday_index

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
# Buckets shown before the one containing the reference date
LEADING_BUCKETS = 5


class TrendTimeline(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True, slots=True)
class TrendPoint:
    start: date
    end: date
    label: str
    count: int
    is_future: bool


def _bucket_start(anchor: date, timeline: TrendTimeline, offset: int) -> date:
    if timeline is TrendTimeline.DAY:
        return anchor + timedelta(days=offset)
    if timeline is TrendTimeline.WEEK:
        sunday = anchor - timedelta(days=weekday_index(anchor))
        return sunday + timedelta(weeks=offset)
    return add_months(month_start(anchor), offset)


def trend_buckets(
    reference_date: date, timeline: TrendTimeline, points: int = 10
) -> list[tuple[date, date]]:
    """Inclusive ``(start, end)`` ranges; the reference bucket is sixth when ``points`` allows."""

    timeline = TrendTimeline(timeline)
    starts = [
        _bucket_start(reference_date, timeline, offset)
        for offset in range(-LEADING_BUCKETS, points - LEADING_BUCKETS + 1)
    ]
    return [
        (starts[index], starts[index + 1] - timedelta(days=1)) for index in range(points)
    ]


def activity_trend(
    completions: Mapping[object, Iterable[date]],
    reference_date: date,
    timeline: TrendTimeline,
    today: date,
    points: int = 10,
) -> list[TrendPoint]:
    """Count completions across all habits per bucket; buckets after ``today`` are future."""

    timeline = TrendTimeline(timeline)
    days = [day for dates in completions.values() for day in dates if day <= today]
    result = []
    for start, end in trend_buckets(reference_date, timeline, points):
        is_future = start > today
        count = 0 if is_future else sum(1 for day in days if start <= day <= end)
        label = MONTH_NAMES[start.month - 1] if timeline is TrendTimeline.MONTH else str(start.day)
        result.append(TrendPoint(start=start, end=end, label=label, count=count, is_future=is_future))
    return result


__all__ = ["TrendPoint", "TrendTimeline", "activity_trend", "trend_buckets"]
