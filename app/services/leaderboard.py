"""
Leaderboard ranking and achievements, read from the denormalized UserStats.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.constants import ACHIEVEMENTS, LeaderboardCategory
from app.models.user import User, UserStats

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = {
    LeaderboardCategory.PROBLEMS: UserStats.total_solved,
    LeaderboardCategory.STREAK: UserStats.streak,
    LeaderboardCategory.TIME: UserStats.total_time_spent,
}


def _active_users(db: Session):
    return db.query(User, UserStats).join(UserStats, UserStats.user_id == User.id).filter(
        User.is_active == True  # noqa: E712
    )


def get_ranked_users(
    db: Session, category: LeaderboardCategory, page: int, limit: int
) -> Tuple[List[Tuple[int, User, UserStats]], int]:
    """
    One page of active users ordered by the category's stat.

    Ties are broken by longest streak, then by user id.

    Returns:
        ([(rank, user, stats), ...], total active users with stats)
    """
    column = CATEGORY_COLUMNS[category]
    query = _active_users(db)
    total = query.count()
    rows = query.order_by(
        column.desc(), UserStats.longest_streak.desc(), User.id
    ).offset((page - 1) * limit).limit(limit).all()

    start = (page - 1) * limit
    return [(start + i + 1, user, stats) for i, (user, stats) in enumerate(rows)], total


def get_user_rank(db: Session, user: User, category: LeaderboardCategory = LeaderboardCategory.PROBLEMS) -> int:
    """1 + number of active users strictly ahead in the category."""
    column = CATEGORY_COLUMNS[category]
    stats = user.stats
    value = getattr(stats, column.key, 0) if stats is not None else 0
    ahead = _active_users(db).filter(column > (value or 0)).count()
    return ahead + 1


def _stat(stats: Optional[UserStats], field: str) -> int:
    if stats is None:
        return 0
    return int(getattr(stats, field) or 0)


def get_unlocked_achievements(stats: Optional[UserStats]) -> List[str]:
    """Names of the achievements a stats snapshot has reached."""
    return [
        name
        for name, _, _, field, threshold in ACHIEVEMENTS
        if _stat(stats, field) >= threshold
    ]


def get_achievement_catalog(stats: Optional[UserStats] = None) -> List[Dict[str, Any]]:
    """Every achievement; `unlocked` is only ever true when stats are given."""
    unlocked = set(get_unlocked_achievements(stats)) if stats is not None else set()
    return [
        {
            "name": name,
            "description": description,
            "icon": icon,
            "threshold": threshold,
            "unlocked": name in unlocked,
        }
        for name, description, icon, _, threshold in ACHIEVEMENTS
    ]


def get_top_by(db: Session, column) -> Optional[Tuple[User, UserStats]]:
    """The active user with the highest value in a stats column."""
    return _active_users(db).order_by(column.desc(), User.id).first()
