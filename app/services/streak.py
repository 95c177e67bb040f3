"""
Streak calculation over a user's activity dates.

An active day is a calendar day with at least one non-pending Progress
record whose last attempt fell on it. Timestamps are truncated to the day
before any differencing, so two attempts 30 hours apart that cross a
single midnight are consecutive.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ACTIVE_STATUSES
from app.models.progress import Progress
from app.utils.helpers import to_local_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakSummary:
    current_streak: int = 0
    longest_streak: int = 0


def _active_days(activity: Iterable[Union[datetime, date]]) -> List[date]:
    """Distinct calendar days, newest first."""
    return sorted({to_local_date(a) for a in activity if a is not None}, reverse=True)


def calculate_streaks(
    activity: Iterable[Union[datetime, date]],
    today: Optional[date] = None,
    window_days: Optional[int] = None,
) -> StreakSummary:
    """
    Compute current and longest consecutive-day streaks.

    Args:
        activity: Activity timestamps or dates, any order, duplicates allowed
        today: Reference day for the current streak (defaults to date.today())
        window_days: If set, only the trailing window_days days (today
            included) are looked at for the current streak, which caps it
            at window_days. The longest streak always spans the full history.

    Returns:
        StreakSummary; zeros for empty activity
    """
    today = today or date.today()
    days = _active_days(activity)
    if not days:
        return StreakSummary()

    longest = 0
    run = 1
    first_run: Optional[int] = None
    for previous, current in zip(days, days[1:]):
        if (previous - current).days == 1:
            run += 1
            continue
        if first_run is None:
            first_run = run
        longest = max(longest, run)
        run = 1
    if first_run is None:
        first_run = run
    longest = max(longest, run)

    current_streak = 0
    if days[0] == today:
        current_streak = first_run
        if window_days:
            current_streak = min(current_streak, window_days)

    return StreakSummary(current_streak=current_streak, longest_streak=longest)


def get_activity_dates(db: Session, user_id: int) -> List[datetime]:
    """Last-attempt timestamps of the user's non-pending Progress rows."""
    rows = db.query(Progress.last_attempt_date).filter(
        Progress.user_id == user_id,
        Progress.status.in_(ACTIVE_STATUSES),
        Progress.last_attempt_date.isnot(None),
    ).all()
    return [row[0] for row in rows]


def get_user_streak(db: Session, user_id: int, today: Optional[date] = None) -> StreakSummary:
    """Streaks for one user straight from their Progress history."""
    summary = calculate_streaks(
        get_activity_dates(db, user_id),
        today=today,
        window_days=settings.STREAK_WINDOW_DAYS,
    )
    logger.debug(f"Streak for user {user_id}: {summary}")
    return summary
