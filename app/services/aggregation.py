"""
Progress aggregation.

Per-user and platform-wide rollups of Progress rows: completion stats,
topic rollups, recent activity, activity timelines and admin analytics.
Every rollup is a single grouped query; results are plain dicts ready to be
validated by the response schemas.

Rows whose problem or topic no longer exists still count in completion
totals but are left out of any projection that carries a problem or topic
name.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import REPORT_PERIOD_DAYS, ProgressStatus, ReportPeriod
from app.models.problem import Problem
from app.models.progress import Progress
from app.models.topic import Topic
from app.models.user import User, UserStats
from app.services.streak import get_user_streak
from app.utils.helpers import calculate_percentage, to_local_date

logger = logging.getLogger(__name__)


def _count_status(status: ProgressStatus):
    return func.sum(case((Progress.status == status.value, 1), else_=0))


def _since(days: int) -> datetime:
    return datetime.now() - timedelta(days=days)


def _day_key(value: Any) -> str:
    return to_local_date(value).isoformat()


# ============= Per-user rollups =============

def get_completion_stats(db: Session, user_id: int) -> Dict[str, int]:
    """
    {total, completed, attempted, percentage} over all of the user's rows.

    total is the number of Progress rows the user has, not the catalog size.
    """
    total, completed, attempted = db.query(
        func.count(Progress.id),
        _count_status(ProgressStatus.COMPLETED),
        _count_status(ProgressStatus.ATTEMPTED),
    ).filter(Progress.user_id == user_id).one()

    total = int(total or 0)
    completed = int(completed or 0)
    return {
        "total": total,
        "completed": completed,
        "attempted": int(attempted or 0),
        "percentage": calculate_percentage(completed, total),
    }


def get_topic_progress(
    db: Session,
    user_id: Optional[int] = None,
    since: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    One rollup per topic that has at least one Progress row.

    Scoped to a user when user_id is given, platform-wide otherwise. Rows
    whose problem is gone are left out even if their topic_id survives.
    """
    query = db.query(
        Topic.id,
        Topic.title,
        Topic.slug,
        func.count(Progress.id),
        _count_status(ProgressStatus.COMPLETED),
        _count_status(ProgressStatus.ATTEMPTED),
        func.coalesce(func.avg(Progress.time_spent), 0),
    ).join(
        Problem, Progress.problem_id == Problem.id
    ).join(
        Topic, Progress.topic_id == Topic.id
    )

    if user_id is not None:
        query = query.filter(Progress.user_id == user_id)
    if since is not None:
        query = query.filter(Progress.updated_at >= since)

    rows = query.group_by(
        Topic.id, Topic.title, Topic.slug, Topic.order
    ).order_by(Topic.order, Topic.id).all()

    result = []
    for topic_id, title, slug, total, completed, attempted, avg_time in rows:
        completed = int(completed or 0)
        result.append({
            "topic_id": topic_id,
            "topic_name": title,
            "topic_slug": slug,
            "total": int(total),
            "completed": completed,
            "attempted": int(attempted or 0),
            "percentage": calculate_percentage(completed, total),
            "avg_time_spent": round(float(avg_time or 0), 1),
        })
    return result


def get_recent_activity(db: Session, user_id: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """The user's most recently updated rows, newest first."""
    limit = limit or settings.RECENT_ACTIVITY_LIMIT
    rows = db.query(Progress, Problem.title, Problem.difficulty, Topic.title).join(
        Problem, Progress.problem_id == Problem.id
    ).join(
        Topic, Progress.topic_id == Topic.id
    ).filter(
        Progress.user_id == user_id
    ).order_by(
        Progress.updated_at.desc(), Progress.id.desc()
    ).limit(limit).all()

    return [
        {
            "id": progress.id,
            "problem_id": progress.problem_id,
            "problem_title": problem_title,
            "difficulty": difficulty,
            "topic": topic_title,
            "status": progress.status,
            "date": progress.updated_at,
            "time_spent": progress.time_spent or 0,
            "confidence": progress.confidence,
        }
        for progress, problem_title, difficulty, topic_title in rows
    ]


def get_user_overview(db: Session, user: User) -> Dict[str, Any]:
    """Dashboard payload: completion stats, topic rollups, recent activity, cached stats."""
    user_id = int(user.id)  # type: ignore
    return {
        "completion_stats": get_completion_stats(db, user_id),
        "topic_progress": get_topic_progress(db, user_id),
        "recent_activity": get_recent_activity(db, user_id),
        "user_stats": user.stats,
    }


def get_activity_heatmap(db: Session, user_id: int, days: int) -> List[Dict[str, Any]]:
    """Per-day count of rows whose last attempt falls inside the last `days` days."""
    day = func.date(Progress.last_attempt_date)
    rows = db.query(day, func.count(Progress.id)).filter(
        Progress.user_id == user_id,
        Progress.last_attempt_date >= _since(days),
    ).group_by(day).order_by(day).all()
    return [{"date": _day_key(d), "count": int(count)} for d, count in rows if d is not None]


def get_activity_timeline(db: Session, user_id: Optional[int] = None, days: int = 30) -> List[Dict[str, Any]]:
    """Per-day solved/attempted counts and time by updated_at."""
    day = func.date(Progress.updated_at)
    query = db.query(
        day,
        _count_status(ProgressStatus.COMPLETED),
        _count_status(ProgressStatus.ATTEMPTED),
        func.coalesce(func.sum(Progress.time_spent), 0),
    ).filter(Progress.updated_at >= _since(days))
    if user_id is not None:
        query = query.filter(Progress.user_id == user_id)

    rows = query.group_by(day).order_by(day).all()
    return [
        {
            "date": _day_key(d),
            "problems_solved": int(solved or 0),
            "problems_attempted": int(attempted or 0),
            "time_spent": int(time_spent or 0),
        }
        for d, solved, attempted, time_spent in rows
        if d is not None
    ]


def get_user_report(db: Session, user: User, period: ReportPeriod) -> Dict[str, Any]:
    """Status breakdown and topics covered for rows updated within the period."""
    user_id = int(user.id)  # type: ignore
    end_date = datetime.now()
    start_date = end_date - timedelta(days=REPORT_PERIOD_DAYS[period])

    breakdown_rows = db.query(
        Progress.status,
        func.count(Progress.id),
        func.coalesce(func.sum(Progress.time_spent), 0),
    ).filter(
        Progress.user_id == user_id,
        Progress.updated_at >= start_date,
    ).group_by(Progress.status).order_by(Progress.status).all()

    breakdown = [
        {"status": status, "count": int(count), "total_time": int(total_time or 0)}
        for status, count, total_time in breakdown_rows
    ]

    topics = [
        {
            "topic_id": rollup["topic_id"],
            "topic_name": rollup["topic_name"],
            "problems_solved": rollup["total"],
        }
        for rollup in get_topic_progress(db, user_id, since=start_date)
    ]

    return {
        "username": user.username,
        "period": period.value,
        "start_date": start_date,
        "end_date": end_date,
        "summary": {
            "total_activity": sum(item["count"] for item in breakdown),
            "total_time_spent": sum(item["total_time"] for item in breakdown),
            "current_streak": get_user_streak(db, user_id).current_streak,
        },
        "progress_breakdown": breakdown,
        "topics_covered": topics,
    }


def get_progress_summary(db: Session, user_id: int) -> Dict[str, Any]:
    """Admin view of one user's totals, including time and average confidence."""
    total, completed, attempted, time_spent, avg_confidence = db.query(
        func.count(Progress.id),
        _count_status(ProgressStatus.COMPLETED),
        _count_status(ProgressStatus.ATTEMPTED),
        func.coalesce(func.sum(Progress.time_spent), 0),
        func.avg(Progress.confidence),
    ).filter(Progress.user_id == user_id).one()

    total = int(total or 0)
    completed = int(completed or 0)
    return {
        "total": total,
        "completed": completed,
        "attempted": int(attempted or 0),
        "percentage": calculate_percentage(completed, total),
        "total_time_spent": int(time_spent or 0),
        "avg_confidence": int(round(float(avg_confidence or 0))),
    }


# ============= Platform-wide rollups =============

def _active_since_filter(days: int):
    return UserStats.last_active_date >= _since(days)


def get_platform_overview(db: Session) -> Dict[str, int]:
    """Headline counts for the admin dashboard."""
    totals = db.query(
        func.count(Progress.id),
        _count_status(ProgressStatus.COMPLETED),
        _count_status(ProgressStatus.ATTEMPTED),
    ).one()

    return {
        "total_users": db.query(User).count(),
        "active_users": db.query(UserStats).filter(
            _active_since_filter(settings.ACTIVE_USER_WINDOW_DAYS)
        ).count(),
        "total_problems": db.query(Problem).count(),
        "total_topics": db.query(Topic).count(),
        "total_progress_records": int(totals[0] or 0),
        "completed_problems": int(totals[1] or 0),
        "attempted_problems": int(totals[2] or 0),
    }


def get_user_metrics(db: Session) -> Dict[str, float]:
    """Averages and totals over every user's cached stats."""
    avg_solved, avg_streak, avg_time, total_time = db.query(
        func.avg(UserStats.total_solved),
        func.avg(UserStats.streak),
        func.avg(UserStats.total_time_spent),
        func.sum(UserStats.total_time_spent),
    ).one()
    return {
        "avg_problems_solved": round(float(avg_solved or 0), 2),
        "avg_streak": round(float(avg_streak or 0), 2),
        "avg_time_spent": round(float(avg_time or 0), 2),
        "total_time_spent": int(total_time or 0),
    }


def get_topic_engagement(db: Session, since: Optional[datetime] = None, limit: int = 10) -> List[Dict[str, Any]]:
    """Most active topics platform-wide, by number of progress rows."""
    rollups = get_topic_progress(db, since=since)
    rollups.sort(key=lambda r: (-r["total"], r["topic_id"]))
    return [
        {
            "topic_id": r["topic_id"],
            "topic_name": r["topic_name"],
            "total_activity": r["total"],
            "completed_count": r["completed"],
            "completion_rate": r["percentage"],
            "avg_time_spent": r["avg_time_spent"],
        }
        for r in rollups[:limit]
    ]


def get_daily_activity(db: Session, days: int = 30) -> List[Dict[str, Any]]:
    """Platform-wide count of rows touched per day."""
    day = func.date(Progress.updated_at)
    rows = db.query(day, func.count(Progress.id)).filter(
        Progress.updated_at >= _since(days)
    ).group_by(day).order_by(day).all()
    return [{"date": _day_key(d), "count": int(count)} for d, count in rows if d is not None]


def get_user_growth(db: Session, days: int) -> List[Dict[str, Any]]:
    """New registrations per day."""
    day = func.date(User.created_at)
    rows = db.query(day, func.count(User.id)).filter(
        User.created_at >= _since(days)
    ).group_by(day).order_by(day).all()
    return [{"date": _day_key(d), "new_users": int(count)} for d, count in rows if d is not None]


def get_difficulty_distribution(db: Session, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Attempts, completions and average time per problem difficulty."""
    query = db.query(
        Problem.difficulty,
        func.count(Progress.id),
        _count_status(ProgressStatus.COMPLETED),
        func.coalesce(func.avg(Progress.time_spent), 0),
    ).join(Problem, Progress.problem_id == Problem.id)
    if since is not None:
        query = query.filter(Progress.updated_at >= since)

    rows = query.group_by(Problem.difficulty).order_by(Problem.difficulty).all()
    return [
        {
            "difficulty": difficulty,
            "total_attempts": int(total),
            "completed_count": int(completed or 0),
            "completion_rate": calculate_percentage(int(completed or 0), int(total)),
            "avg_time_spent": round(float(avg_time or 0), 1),
        }
        for difficulty, total, completed, avg_time in rows
    ]


def get_platform_analytics(db: Session, period_days: int) -> Dict[str, Any]:
    """Admin analytics over the trailing period."""
    since = _since(period_days)
    return {
        "user_growth": get_user_growth(db, period_days),
        "problem_activity": get_activity_timeline(db, days=period_days),
        "topic_engagement": get_topic_engagement(db, since=since),
        "difficulty_distribution": get_difficulty_distribution(db, since=since),
    }


def count_active_users(db: Session, since: datetime) -> int:
    """Active accounts whose stats were touched since the given time."""
    return db.query(User).join(UserStats, UserStats.user_id == User.id).filter(
        User.is_active == True,  # noqa: E712
        UserStats.last_active_date >= since,
    ).count()
