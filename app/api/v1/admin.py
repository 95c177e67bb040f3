"""
Admin endpoints: platform dashboard, analytics and user management.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import UserRole
from app.core.permissions import require_admin
from app.db.base import get_db
from app.models.user import User, UserStats
from app.schemas.admin import AdminDashboard, AdminUserDetails, AdminUserSummary, PlatformAnalytics
from app.schemas.common import DataResponse, Message, PaginatedResponse
from app.schemas.progress import UserStatsSchema
from app.schemas.user import RoleUpdate, User as UserSchema
from app.services import aggregation
from app.services.stats_writeback import recompute_user_stats
from app.utils.helpers import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

SORT_COLUMNS = {
    "createdAt": User.created_at,
    "username": User.username,
    "email": User.email,
    "fullName": User.full_name,
    "lastLogin": User.last_login,
    "totalSolved": UserStats.total_solved,
    "streak": UserStats.streak,
}


def _summary(user: User, stats: Optional[UserStats]) -> AdminUserSummary:
    return AdminUserSummary(
        id=user.id,  # type: ignore
        username=user.username,  # type: ignore
        email=user.email,  # type: ignore
        full_name=user.full_name,  # type: ignore
        role=user.role,  # type: ignore
        is_active=bool(user.is_active),
        created_at=user.created_at,  # type: ignore
        last_active_date=stats.last_active_date if stats is not None else None,  # type: ignore
        total_solved=stats.total_solved if stats is not None else 0,  # type: ignore
        streak=stats.streak if stats is not None else 0,  # type: ignore
    )


def _users_with_stats(db: Session):
    return db.query(User, UserStats).outerjoin(UserStats, UserStats.user_id == User.id)


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/dashboard", response_model=DataResponse[AdminDashboard])
def get_dashboard(db: Session = Depends(get_db)) -> Any:
    """Platform overview for the admin dashboard."""
    recent = _users_with_stats(db).order_by(User.created_at.desc(), User.id.desc()).limit(10).all()
    most_active = _users_with_stats(db).order_by(
        UserStats.total_solved.desc(), UserStats.streak.desc(), User.id
    ).limit(10).all()

    return {
        "data": {
            "overview": aggregation.get_platform_overview(db),
            "user_metrics": aggregation.get_user_metrics(db),
            "recent_users": [_summary(u, s) for u, s in recent],
            "most_active_users": [_summary(u, s) for u, s in most_active],
            "topic_popularity": aggregation.get_topic_engagement(db),
            "daily_activity": aggregation.get_daily_activity(db, days=30),
        }
    }


@router.get("/analytics", response_model=DataResponse[PlatformAnalytics])
def get_analytics(
    period: int = Query(30, ge=1, le=365, description="Trailing window in days"),
    db: Session = Depends(get_db),
) -> Any:
    """User growth, problem activity, topic engagement and difficulty mix."""
    return {"data": {"period": period, **aggregation.get_platform_analytics(db, period)}}


@router.get("/users", response_model=PaginatedResponse[AdminUserSummary])
def list_users(
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Any:
    """Search, filter and sort all users."""
    if sort_by not in SORT_COLUMNS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sortBy. Must be one of: {', '.join(SORT_COLUMNS)}",
        )

    query = _users_with_stats(db)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            User.username.ilike(pattern),
            User.email.ilike(pattern),
            User.full_name.ilike(pattern),
        ))
    if role:
        query = query.filter(User.role == role.value)

    column = SORT_COLUMNS[sort_by]
    order = column.desc() if sort_order == "desc" else column.asc()

    total = query.count()
    rows = query.order_by(order, User.id).offset((page - 1) * limit).limit(limit).all()
    return {
        "data": [_summary(u, s) for u, s in rows],
        "pagination": pagination_meta(page, limit, total),
    }


@router.get("/users/{user_id}", response_model=DataResponse[AdminUserDetails])
def get_user_details(user_id: int, db: Session = Depends(get_db)) -> Any:
    """Profile, progress totals, topic rollups, recent activity and a 30-day timeline."""
    user = _get_user(db, user_id)
    return {
        "data": {
            "user": UserSchema.model_validate(user),
            "progress": aggregation.get_progress_summary(db, user_id),
            "topic_progress": aggregation.get_topic_progress(db, user_id),
            "recent_activity": aggregation.get_recent_activity(db, user_id, limit=20),
            "activity_timeline": aggregation.get_activity_timeline(db, user_id, days=30),
        }
    }


@router.put("/users/{user_id}/role", response_model=DataResponse[UserSchema])
def update_user_role(
    user_id: int,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Change a user's role."""
    user = _get_user(db, user_id)
    user.role = body.role.value  # type: ignore
    db.commit()
    db.refresh(user)

    logger.info(f"Admin {current_user.id} set role of user {user_id} to {body.role.value}")
    return {"message": "User role updated successfully", "data": UserSchema.model_validate(user)}


@router.delete("/users/{user_id}", response_model=Message)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Hard-delete a user together with their progress and stats."""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )

    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()

    logger.info(f"Admin {current_user.id} deleted user {user_id}")
    return {"message": "User and all associated data deleted successfully"}


@router.post("/users/{user_id}/recompute-stats", response_model=DataResponse[UserStatsSchema])
def recompute_stats(user_id: int, db: Session = Depends(get_db)) -> Any:
    """Rebuild a user's stats snapshot from their progress history."""
    _get_user(db, user_id)
    stats = recompute_user_stats(db, user_id)
    return {"message": "Stats recomputed", "data": UserStatsSchema.model_validate(stats)}
