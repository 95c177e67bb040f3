"""
Small formatting and arithmetic helpers shared by endpoints and services.
"""
import math
import re
from datetime import date, datetime
from typing import Dict, Optional, Union


def calculate_percentage(part: float, total: float) -> int:
    """
    Percentage of part over total, rounded half up to an integer.

    Returns 0 when total is 0.
    """
    if not total:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def format_duration(minutes: Optional[int]) -> str:
    """Format a duration in minutes as '45 min' or '2h 5m'."""
    minutes = int(minutes or 0)
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"


def generate_slug(text: str) -> str:
    """Generate a URL-friendly slug, e.g. 'Linked Lists!' -> 'linked-lists'."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    """Build the pagination block returned with list endpoints."""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def to_local_date(value: Union[datetime, date, str]) -> date:
    """
    Truncate a timestamp to its calendar day.

    Aware datetimes are converted to local time first so they line up with
    date.today(); naive ones are taken as already local. Date strings from
    SQL date() groupings are parsed as ISO dates.
    """
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value
