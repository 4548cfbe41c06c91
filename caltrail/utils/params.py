# caltrail/utils/params.py
"""Query-string parsing shared by the blueprints."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Tuple

from caltrail.errors import InvalidInput

MAX_PAGE_SIZE = 100


def _positive_int(raw, name: str, default: int) -> int:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be an integer", fields={name: ["Not a valid integer"]})
    if value < 1:
        raise InvalidInput(f"{name} must be >= 1", fields={name: ["Must be >= 1"]})
    return value


def page_args(args, default_limit: int = 20) -> Tuple[int, int]:
    """?page=&limit= with sane bounds."""
    page = _positive_int(args.get("page"), "page", 1)
    limit = min(_positive_int(args.get("limit"), "limit", default_limit), MAX_PAGE_SIZE)
    return page, limit


def parse_day(raw: str, name: str = "date") -> date:
    """YYYY-MM-DD, or a full ISO datetime reduced to its date."""
    try:
        if "T" in raw:
            return datetime.fromisoformat(raw).date()
        return date.fromisoformat(raw.strip())
    except (TypeError, ValueError):
        raise InvalidInput("Invalid date. Use YYYY-MM-DD", fields={name: ["Invalid date"]})


def parse_bound(raw: Optional[str], name: str, end: bool = False) -> Optional[datetime]:
    """
    Range bound from a query arg. A bare date as an end bound covers that
    whole day; as a start bound it means midnight.
    """
    if not raw:
        return None
    raw = raw.strip()
    if "T" in raw or " " in raw:
        try:
            value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInput("Invalid datetime", fields={name: ["Invalid datetime"]})
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value
    day = parse_day(raw, name)
    return datetime.combine(day, time(23, 59, 59, 999000) if end else time.min)


def parse_bool(raw: Optional[str]) -> Optional[bool]:
    if raw is None or raw == "":
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")
