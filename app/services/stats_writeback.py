"""
Denormalized stats writeback.

UserStats is a materialized view over a user's Progress rows. After every
progress mutation the whole snapshot is recomputed from scratch and
overwritten; nothing else writes to it. Each writeback costs O(rows for
that user); there are no incremental counters.

Writebacks for the same user are serialized by locking the user's
UserStats row before Progress is read.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ACTIVE_STATUSES, Difficulty, ProgressStatus
from app.models.problem import Problem
from app.models.progress import Progress
from app.models.user import UserStats
from app.services.streak import calculate_streaks

logger = logging.getLogger(__name__)

# (status, problem difficulty, time spent, last attempt date)
ProgressFact = Tuple[str, Optional[str], Optional[int], Optional[datetime]]

_DIFFICULTY_FIELDS = {
    Difficulty.EASY.value: "easy_solved",
    Difficulty.MEDIUM.value: "medium_solved",
    Difficulty.HARD.value: "hard_solved",
}


@dataclass
class StatsSnapshot:
    total_solved: int = 0
    easy_solved: int = 0
    medium_solved: int = 0
    hard_solved: int = 0
    streak: int = 0
    longest_streak: int = 0
    total_time_spent: int = 0


def summarize_progress(
    facts: Iterable[ProgressFact],
    today: Optional[date] = None,
    window_days: Optional[int] = None,
) -> StatsSnapshot:
    """
    Pure summary of a user's Progress history.

    Completed rows whose problem no longer exists count towards
    total_solved but towards no difficulty bucket.
    """
    snapshot = StatsSnapshot()
    activity = []
    for status, difficulty, time_spent, last_attempt in facts:
        snapshot.total_time_spent += time_spent or 0
        if status == ProgressStatus.COMPLETED.value:
            snapshot.total_solved += 1
            field = _DIFFICULTY_FIELDS.get(difficulty)
            if field:
                setattr(snapshot, field, getattr(snapshot, field) + 1)
        if status in ACTIVE_STATUSES and last_attempt is not None:
            activity.append(last_attempt)

    streaks = calculate_streaks(activity, today=today, window_days=window_days)
    snapshot.streak = streaks.current_streak
    snapshot.longest_streak = streaks.longest_streak
    return snapshot


def get_or_create_stats(db: Session, user_id: int, lock: bool = False) -> UserStats:
    """Fetch the user's stats row, creating an empty one if missing."""
    query = db.query(UserStats).filter(UserStats.user_id == user_id)
    if lock:
        query = query.with_for_update()
    stats = query.first()
    if stats is None:
        stats = UserStats(user_id=user_id)
        db.add(stats)
        db.flush()
    return stats


def recompute_user_stats(db: Session, user_id: int, today: Optional[date] = None) -> UserStats:
    """
    Rebuild and persist the stats snapshot for one user.

    Runs as its own transaction: lock stats row, aggregate, write, commit.

    Raises:
        SQLAlchemyError: If the database work fails (the transaction is rolled back)
    """
    try:
        stats = get_or_create_stats(db, user_id, lock=True)

        facts = db.query(
            Progress.status,
            Problem.difficulty,
            Progress.time_spent,
            Progress.last_attempt_date,
        ).outerjoin(
            Problem, Progress.problem_id == Problem.id
        ).filter(
            Progress.user_id == user_id
        ).all()

        snapshot = summarize_progress(
            facts, today=today, window_days=settings.STREAK_WINDOW_DAYS
        )

        stats.total_solved = snapshot.total_solved  # type: ignore
        stats.easy_solved = snapshot.easy_solved  # type: ignore
        stats.medium_solved = snapshot.medium_solved  # type: ignore
        stats.hard_solved = snapshot.hard_solved  # type: ignore
        stats.streak = snapshot.streak  # type: ignore
        stats.longest_streak = snapshot.longest_streak  # type: ignore
        stats.total_time_spent = snapshot.total_time_spent  # type: ignore
        stats.last_active_date = datetime.now()  # type: ignore
        stats.version = (stats.version or 0) + 1  # type: ignore

        db.commit()
        db.refresh(stats)
    except Exception:
        db.rollback()
        raise

    logger.debug(
        f"Stats writeback for user {user_id}: solved={snapshot.total_solved} "
        f"streak={snapshot.streak} version={stats.version}"
    )
    return stats


def refresh_user_stats(db: Session, user_id: int) -> Optional[UserStats]:
    """
    Writeback hook called after a progress mutation has been committed.

    A failure here leaves the previous (stale) snapshot in place; the
    progress write itself stands and the next writeback repairs the stats.
    """
    try:
        return recompute_user_stats(db, user_id)
    except Exception:
        logger.exception(f"Stats writeback failed for user {user_id}")
        return None
