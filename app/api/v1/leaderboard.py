"""
Leaderboard and achievements endpoints.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import LeaderboardCategory
from app.core.dependencies import get_current_active_user, get_optional_user
from app.db.base import get_db
from app.models.user import User, UserStats
from app.schemas.common import DataResponse, PaginatedResponse
from app.schemas.leaderboard import Achievement, LeaderboardEntry, LeaderboardStats, UserRank
from app.schemas.progress import UserStatsSchema
from app.services.leaderboard import (
    get_achievement_catalog,
    get_ranked_users,
    get_top_by,
    get_unlocked_achievements,
    get_user_rank,
)
from app.utils.helpers import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[LeaderboardEntry])
def get_leaderboard(
    category: LeaderboardCategory = LeaderboardCategory.PROBLEMS,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """
    Ranked active users for a category.

    Ranks come from the denormalized stats; ties go to the longer
    longest-streak.
    """
    ranked, total = get_ranked_users(db, category, page, limit)
    entries = [
        {
            "id": user.id,
            "rank": rank,
            "username": user.username,
            "full_name": user.full_name,
            "avatar_url": user.avatar_url,
            "role": user.role,
            "stats": UserStatsSchema.model_validate(stats),
            "achievements": get_unlocked_achievements(stats),
            "is_current_user": current_user is not None and user.id == current_user.id,
        }
        for rank, user, stats in ranked
    ]
    return {"data": entries, "pagination": pagination_meta(page, limit, total)}


@router.get("/rank", response_model=DataResponse[UserRank])
def get_my_rank(
    category: LeaderboardCategory = LeaderboardCategory.PROBLEMS,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """The caller's rank in a category, out of all active users."""
    total = db.query(User).join(UserStats, UserStats.user_id == User.id).filter(
        User.is_active == True  # noqa: E712
    ).count()
    return {
        "data": {
            "category": category.value,
            "rank": get_user_rank(db, current_user, category),
            "total": total,
        }
    }


@router.get("/achievements", response_model=DataResponse[List[Achievement]])
def get_achievements(current_user: Optional[User] = Depends(get_optional_user)) -> Any:
    """Achievement catalog; entries are marked unlocked for authenticated callers."""
    stats = current_user.stats if current_user is not None else None
    return {"data": get_achievement_catalog(stats)}


@router.get("/stats", response_model=DataResponse[LeaderboardStats])
def get_leaderboard_stats(db: Session = Depends(get_db)) -> Any:
    """Platform headline numbers for the leaderboard page."""
    total_users = db.query(User).filter(User.is_active == True).count()  # noqa: E712
    active_since = datetime.now() - timedelta(days=settings.ACTIVE_USER_WINDOW_DAYS)
    active_users = db.query(UserStats).join(User, User.id == UserStats.user_id).filter(
        User.is_active == True,  # noqa: E712
        UserStats.last_active_date >= active_since,
    ).count()

    top = get_top_by(db, UserStats.total_solved)
    longest = get_top_by(db, UserStats.longest_streak)

    return {
        "data": {
            "total_users": total_users,
            "active_users": active_users,
            "top_performer": {
                "username": top[0].username if top else None,
                "problems_solved": top[1].total_solved if top else 0,
            },
            "longest_streak": {
                "username": longest[0].username if longest else None,
                "streak": longest[1].longest_streak if longest else 0,
            },
        }
    }
