"""
Public community endpoints backed by user stats.
"""
from datetime import datetime, timedelta
from typing import Any, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.constants import ONLINE_WINDOW_MINUTES
from app.db.base import get_db
from app.models.user import User, UserStats
from app.schemas.common import DataResponse
from app.schemas.leaderboard import CommunityMember, CommunityStats
from app.services.aggregation import count_active_users

router = APIRouter()


def _online_since() -> datetime:
    return datetime.now() - timedelta(minutes=ONLINE_WINDOW_MINUTES)


def _member(user: User, stats: UserStats, online_since: datetime) -> dict:
    last_active = stats.last_active_date
    if last_active is not None and last_active.tzinfo is not None:
        last_active = last_active.astimezone().replace(tzinfo=None)
    return {
        "id": user.id,
        "username": user.username,
        "avatar_url": user.avatar_url,
        "role": user.role,
        "stats": {"total_solved": stats.total_solved, "streak": stats.streak},
        "is_online": last_active is not None and last_active >= online_since,
    }


def _active_members(db: Session):
    return db.query(User, UserStats).join(UserStats, UserStats.user_id == User.id).filter(
        User.is_active == True  # noqa: E712
    )


@router.get("/members/top", response_model=DataResponse[List[CommunityMember]])
def get_top_members(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)) -> Any:
    """Most problems solved, then longest current streak."""
    rows = _active_members(db).order_by(
        UserStats.total_solved.desc(), UserStats.streak.desc(), User.id
    ).limit(limit).all()
    online_since = _online_since()
    return {"data": [_member(user, stats, online_since) for user, stats in rows]}


@router.get("/members/online", response_model=DataResponse[List[CommunityMember]])
def get_online_members(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)) -> Any:
    """Members whose stats were refreshed in the last few minutes."""
    online_since = _online_since()
    rows = _active_members(db).filter(
        UserStats.last_active_date >= online_since
    ).order_by(UserStats.last_active_date.desc()).limit(limit).all()
    return {"data": [_member(user, stats, online_since) for user, stats in rows]}


@router.get("/stats", response_model=DataResponse[CommunityStats])
def get_community_stats(db: Session = Depends(get_db)) -> Any:
    """Member count and how many were active today and right now."""
    return {
        "data": {
            "total_members": db.query(User).filter(User.is_active == True).count(),  # noqa: E712
            "active_today": count_active_users(db, datetime.now() - timedelta(days=1)),
            "online_now": count_active_users(db, _online_since()),
        }
    }
