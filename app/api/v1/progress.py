"""
API endpoints for problem progress, stats and activity.

Every mutation commits the Progress row first and then triggers the
stats writeback for the caller.
"""
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import DEFAULT_HEATMAP_DAYS, ProgressStatus, ReportPeriod
from app.core.dependencies import get_current_active_user
from app.db.base import get_db
from app.models.problem import Problem
from app.models.progress import Progress
from app.models.topic import Topic
from app.models.user import User
from app.schemas.common import DataResponse, Message, PaginatedResponse
from app.schemas.progress import (
    ActivityReport,
    HeatmapDay,
    Progress as ProgressSchema,
    ProgressCreateRequest,
    ProgressListItem,
    ProgressOverview,
    ProgressStats,
    ProgressUpdateRequest,
    ProgressUpdateResult,
    StreakInfo,
    UserStatsSchema,
)
from app.schemas.topic import ProblemProgress, ProblemWithProgress, Topic as TopicSchema, TopicDetailedProgress
from app.services import aggregation
from app.services.leaderboard import get_user_rank
from app.services.progress_tracker import ProgressUpdate, reset_progress, upsert_progress
from app.services.stats_writeback import get_or_create_stats, refresh_user_stats
from app.services.streak import get_user_streak
from app.utils.helpers import calculate_percentage, format_duration, pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter()


def _record_progress(db: Session, user: User, problem_id: int, body: ProgressUpdateRequest) -> dict:
    problem = db.query(Problem).filter(
        Problem.id == problem_id,
        Problem.is_active == True,  # noqa: E712
    ).first()
    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")

    update = ProgressUpdate(
        status=body.status.value,
        time_spent=body.time_spent,
        confidence=body.confidence,
        notes=body.notes,
        code=body.code,
        language=body.language.value if body.language else None,
        is_bookmarked=body.is_bookmarked,
    )
    user_id = int(user.id)  # type: ignore
    progress = upsert_progress(db, user_id, problem, update)
    logger.info(f"User {user_id} set problem {problem_id} to {update.status} (attempts={progress.attempts})")

    stats = refresh_user_stats(db, user_id)
    return {
        "message": "Progress updated successfully",
        "data": {
            "progress": ProgressSchema.model_validate(progress),
            "user_stats": UserStatsSchema.model_validate(stats) if stats is not None else None,
        },
    }


# ============= Progress Endpoints =============

@router.get("/", response_model=PaginatedResponse[ProgressListItem])
def list_progress(
    status_filter: Optional[ProgressStatus] = Query(None, alias="status"),
    topic_id: Optional[int] = Query(None, alias="topicId"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """The caller's progress rows, most recently updated first."""
    query = db.query(Progress, Problem.title, Problem.difficulty, Topic.title, Topic.slug).join(
        Problem, Progress.problem_id == Problem.id
    ).join(
        Topic, Progress.topic_id == Topic.id
    ).filter(Progress.user_id == current_user.id)

    if status_filter:
        query = query.filter(Progress.status == status_filter.value)
    if topic_id is not None:
        query = query.filter(Progress.topic_id == topic_id)

    total = query.count()
    rows = query.order_by(Progress.updated_at.desc(), Progress.id.desc()).offset(
        (page - 1) * limit
    ).limit(limit).all()

    data = [
        ProgressListItem.model_validate({
            **ProgressSchema.model_validate(progress).model_dump(),
            "problem_title": problem_title,
            "difficulty": difficulty,
            "topic_title": topic_title,
            "topic_slug": topic_slug,
        })
        for progress, problem_title, difficulty, topic_title, topic_slug in rows
    ]
    return {"data": data, "pagination": pagination_meta(page, limit, total)}


@router.get("/user", response_model=DataResponse[ProgressOverview])
def get_user_progress(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Completion stats, per-topic rollups, recent activity and cached stats."""
    return {"data": aggregation.get_user_overview(db, current_user)}


@router.put("/problem/{problem_id}", response_model=DataResponse[ProgressUpdateResult])
def update_problem_progress(
    problem_id: int,
    body: ProgressUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Record a status update for one problem."""
    return _record_progress(db, current_user, problem_id, body)


@router.post("/update", response_model=DataResponse[ProgressUpdateResult])
def update_progress(
    body: ProgressCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Record a status update, with the problem named in the body."""
    return _record_progress(db, current_user, body.problem_id, body)


@router.get("/stats", response_model=DataResponse[ProgressStats])
def get_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Cached stats plus completion rate over the active catalog and rank."""
    stats = current_user.stats or get_or_create_stats(db, int(current_user.id))  # type: ignore
    total_problems = db.query(func.count(Problem.id)).filter(
        Problem.is_active == True  # noqa: E712
    ).scalar() or 0
    completed = db.query(func.count(Progress.id)).filter(
        Progress.user_id == current_user.id,
        Progress.status == ProgressStatus.COMPLETED.value,
    ).scalar() or 0

    data = ProgressStats.model_validate(stats).model_copy(update={
        "total_problems": total_problems,
        "completion_rate": calculate_percentage(completed, total_problems),
        "rank": get_user_rank(db, current_user),
        "total_time_formatted": format_duration(stats.total_time_spent),  # type: ignore
    })
    return {"data": data}


@router.get("/streak", response_model=DataResponse[StreakInfo])
def get_streak(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Current and longest streak, computed from the caller's history."""
    summary = get_user_streak(db, int(current_user.id))  # type: ignore
    stats = current_user.stats
    return {
        "data": {
            "current_streak": summary.current_streak,
            "longest_streak": summary.longest_streak,
            "last_active_date": stats.last_active_date if stats is not None else None,
        }
    }


@router.get("/activity", response_model=DataResponse[List[HeatmapDay]])
def get_activity_heatmap(
    days: int = Query(DEFAULT_HEATMAP_DAYS, ge=1, le=DEFAULT_HEATMAP_DAYS),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Per-day activity counts over the trailing `days` days."""
    return {"data": aggregation.get_activity_heatmap(db, int(current_user.id), days)}  # type: ignore


@router.get("/report", response_model=DataResponse[ActivityReport])
def get_activity_report(
    period: ReportPeriod = ReportPeriod.WEEKLY,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Daily, weekly or monthly activity report for the caller."""
    return {"data": aggregation.get_user_report(db, current_user, period)}


@router.get("/topic/{slug}/detailed", response_model=DataResponse[TopicDetailedProgress])
def get_topic_detailed_progress(
    slug: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """A topic's active problems, each joined with the caller's progress."""
    topic = db.query(Topic).filter(Topic.slug == slug, Topic.is_active == True).first()  # noqa: E712
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    problems = db.query(Problem).filter(
        Problem.topic_id == topic.id,
        Problem.is_active == True,  # noqa: E712
    ).order_by(Problem.order, Problem.id).all()

    rows = db.query(Progress).filter(
        Progress.user_id == current_user.id,
        Progress.problem_id.in_([p.id for p in problems]),
    ).all() if problems else []
    by_problem = {row.problem_id: row for row in rows}

    items = []
    completed = attempted = 0
    for problem in problems:
        row = by_problem.get(problem.id)
        progress = ProblemProgress.model_validate(row) if row is not None else ProblemProgress()
        if progress.status == ProgressStatus.COMPLETED.value:
            completed += 1
        elif progress.status == ProgressStatus.ATTEMPTED.value:
            attempted += 1
        items.append(ProblemWithProgress.model_validate(problem).model_copy(update={"progress": progress}))

    return {
        "data": {
            "topic": TopicSchema.model_validate(topic),
            "problems": items,
            "summary": {
                "total": len(problems),
                "completed": completed,
                "attempted": attempted,
                "percentage": calculate_percentage(completed, len(problems)),
            },
        }
    }


@router.delete("/reset/{problem_id}", response_model=Message)
def reset_problem_progress(
    problem_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """Delete the caller's progress on one problem and rebuild their stats."""
    user_id = int(current_user.id)  # type: ignore
    if not reset_progress(db, user_id, problem_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Progress not found")

    logger.info(f"User {user_id} reset progress on problem {problem_id}")
    refresh_user_stats(db, user_id)
    return {"message": "Progress reset successfully"}
