# caltrail/services/aggregation.py
"""
Nutrition aggregation.

Pure functions over sequences of meal entries. An entry is anything exposing
``quantity`` (grams), ``food`` (nutrient profile per 100 g, object or dict),
and, for the grouped variants, ``meal_type`` and ``date`` (naive local datetime).

Totals are plain floating-point sums; rounding is left to the caller.
"""
from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from caltrail.errors import InvalidInput
from caltrail.models.food import NUTRIENT_FIELDS
from caltrail.models.meal import MealType, OTHER_MEAL_TYPE

MEAL_TYPE_BUCKETS = tuple(m.value for m in MealType) + (OTHER_MEAL_TYPE,)
DAYS_PER_WEEK = 7


# -------- helpers --------
def _nutrient(food: Any, field: str) -> float:
    """Nutrient value per 100 g; missing or None counts as 0."""
    if isinstance(food, dict):
        value = food.get(field)
    else:
        value = getattr(food, field, None)
    return float(value) if value is not None else 0.0


def empty_totals() -> Dict[str, float]:
    return {field: 0.0 for field in NUTRIENT_FIELDS}


def scale(quantity: float, food: Any) -> Dict[str, float]:
    """Contribution of ``quantity`` grams of ``food``."""
    if food is None:
        raise InvalidInput("Meal entry has no resolved food")
    try:
        qty = float(quantity)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid quantity: {quantity!r}")
    if not math.isfinite(qty) or qty <= 0:
        raise InvalidInput(f"Quantity must be a positive finite number, got {qty}")

    multiplier = qty / 100.0
    return {field: _nutrient(food, field) * multiplier for field in NUTRIENT_FIELDS}


def _accumulate(acc: Dict[str, float], entry: Any) -> Dict[str, float]:
    for field, value in scale(entry.quantity, entry.food).items():
        acc[field] += value
    return acc


def _entry_day(entry: Any) -> date:
    value = entry.date
    return value.date() if isinstance(value, datetime) else value


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[00:00:00.000, 23:59:59.999] of a calendar day."""
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59, 999000))
    return start, end


def week_bounds(reference: date) -> Tuple[datetime, datetime]:
    """
    Sunday 00:00:00 of the week containing ``reference`` (the most recent
    Sunday on or before it) through Saturday 23:59:59.999.
    """
    if isinstance(reference, datetime):
        reference = reference.date()
    # date.weekday(): Monday=0 ... Sunday=6
    days_since_sunday = (reference.weekday() + 1) % DAYS_PER_WEEK
    start_day = reference - timedelta(days=days_since_sunday)
    start, _ = day_bounds(start_day)
    _, end = day_bounds(start_day + timedelta(days=DAYS_PER_WEEK - 1))
    return start, end


# -------- public API --------
def aggregate(entries: Iterable[Any]) -> Dict[str, float]:
    """Sum of every nutrient, each entry scaled by quantity / 100."""
    totals = empty_totals()
    for entry in entries:
        _accumulate(totals, entry)
    return totals


def aggregate_by_type(entries: Iterable[Any]) -> Dict[str, Any]:
    """
    Partition into breakfast/lunch/dinner/snack/other. Unset or unknown meal
    types land in "other". Every bucket keeps its entries and its own totals.
    """
    entries = list(entries)
    meals_by_type: Dict[str, List[Any]] = {bucket: [] for bucket in MEAL_TYPE_BUCKETS}
    type_totals = {bucket: empty_totals() for bucket in MEAL_TYPE_BUCKETS}
    totals = empty_totals()

    for entry in entries:
        meal_type = (getattr(entry, "meal_type", None) or "").strip().lower()
        bucket = meal_type if meal_type in meals_by_type else OTHER_MEAL_TYPE
        meals_by_type[bucket].append(entry)
        _accumulate(type_totals[bucket], entry)
        _accumulate(totals, entry)

    return {
        "meals_by_type": meals_by_type,
        "type_totals": type_totals,
        "totals": totals,
        "total_entries": len(entries),
    }


def aggregate_daily(entries: Iterable[Any], day: Optional[date] = None) -> Dict[str, Any]:
    """Totals and entry count; when ``day`` is given only that day's entries count."""
    entries = list(entries)
    if day is not None:
        start, end = day_bounds(day)
        entries = [e for e in entries if start <= e.date <= end]
    return {"totals": aggregate(entries), "total_entries": len(entries)}


def aggregate_weekly(entries: Iterable[Any], week_start_date: date) -> Dict[str, Any]:
    """
    Seven zero-seeded day buckets (Sunday..Saturday), bucketed by calendar date.
    Averages always divide by 7, whether or not a day has entries.
    """
    start, end = week_bounds(week_start_date)
    first_day = start.date()

    daily: Dict[date, Dict[str, Any]] = {}
    for offset in range(DAYS_PER_WEEK):
        day = first_day + timedelta(days=offset)
        bucket = {"date": day.isoformat(), "entries": 0}
        bucket.update(empty_totals())
        daily[day] = bucket

    for entry in entries:
        bucket = daily.get(_entry_day(entry))
        if bucket is None:
            continue
        _accumulate(bucket, entry)
        bucket["entries"] += 1

    weekly_totals = empty_totals()
    total_entries = 0
    for bucket in daily.values():
        for field in NUTRIENT_FIELDS:
            weekly_totals[field] += bucket[field]
        total_entries += bucket["entries"]

    weekly_averages = {field: value / DAYS_PER_WEEK for field, value in weekly_totals.items()}

    return {
        "week_start": first_day.isoformat(),
        "week_end": end.date().isoformat(),
        "daily_data": list(daily.values()),
        "weekly_totals": weekly_totals,
        "weekly_averages": weekly_averages,
        "total_entries": total_entries,
    }


def summarize_by_day(entries: Iterable[Any]) -> Dict[str, Any]:
    """Overall totals plus one bucket per calendar day with entries, newest first."""
    entries = list(entries)
    by_day: Dict[date, Dict[str, Any]] = {}
    for entry in entries:
        day = _entry_day(entry)
        bucket = by_day.get(day)
        if bucket is None:
            bucket = {"date": day.isoformat(), "entries": 0}
            bucket.update(empty_totals())
            by_day[day] = bucket
        _accumulate(bucket, entry)
        bucket["entries"] += 1

    return {
        "summary": aggregate(entries),
        "daily_breakdown": [by_day[d] for d in sorted(by_day, reverse=True)],
        "total_entries": len(entries),
    }
