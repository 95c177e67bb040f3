"""
Pydantic schemas for progress tracking, stats and activity reports.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.core.constants import MAX_CONFIDENCE, MAX_NOTES_LENGTH, MIN_CONFIDENCE, Language, ProgressStatus
from app.schemas.common import CamelModel


class UserStatsSchema(CamelModel):
    """Denormalized stats snapshot."""

    total_solved: int = 0
    easy_solved: int = 0
    medium_solved: int = 0
    hard_solved: int = 0
    streak: int = 0
    longest_streak: int = 0
    total_time_spent: int = 0
    last_active_date: Optional[datetime] = None


# ============= Requests =============

class ProgressUpdateRequest(CamelModel):
    """Body of a status update for one problem."""

    status: ProgressStatus
    time_spent: Optional[int] = Field(None, ge=0)
    confidence: Optional[int] = Field(None, ge=MIN_CONFIDENCE, le=MAX_CONFIDENCE)
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    code: Optional[str] = None
    language: Optional[Language] = None
    is_bookmarked: Optional[bool] = None


class ProgressCreateRequest(ProgressUpdateRequest):
    """Status update that names the problem in the body."""

    problem_id: int


# ============= Responses =============

class Progress(CamelModel):
    """A user's progress row for one problem."""

    id: int
    user_id: int
    problem_id: Optional[int] = None
    topic_id: Optional[int] = None
    status: str
    notes: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    time_spent: int = 0
    attempts: int = 0
    last_attempt_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    confidence: Optional[int] = None
    is_bookmarked: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressListItem(Progress):
    """Progress row with the names of its problem and topic."""

    problem_title: str
    difficulty: str
    topic_title: str
    topic_slug: str


class ProgressUpdateResult(CamelModel):
    """Updated row plus the refreshed stats snapshot."""

    progress: Progress
    user_stats: Optional[UserStatsSchema] = None


class CompletionStats(CamelModel):
    total: int = 0
    completed: int = 0
    attempted: int = 0
    percentage: int = 0


class TopicProgress(CamelModel):
    topic_id: int
    topic_name: str
    topic_slug: str
    total: int
    completed: int
    attempted: int
    percentage: int


class RecentActivity(CamelModel):
    id: int
    problem_id: int
    problem_title: str
    difficulty: str
    topic: str
    status: str
    date: Optional[datetime] = None
    time_spent: int = 0
    confidence: Optional[int] = None


class ProgressOverview(CamelModel):
    """Dashboard payload for one user."""

    completion_stats: CompletionStats
    topic_progress: List[TopicProgress]
    recent_activity: List[RecentActivity]
    user_stats: Optional[UserStatsSchema] = None


class ProgressStats(UserStatsSchema):
    """Stats snapshot plus catalog-relative figures."""

    total_problems: int = 0
    completion_rate: int = 0
    rank: int = 0
    total_time_formatted: str = "0 min"


class StreakInfo(CamelModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[datetime] = None


class HeatmapDay(CamelModel):
    date: str
    count: int


class StatusBreakdown(CamelModel):
    status: str
    count: int
    total_time: int


class TopicCovered(CamelModel):
    topic_id: int
    topic_name: str
    problems_solved: int


class ReportSummary(CamelModel):
    total_activity: int = 0
    total_time_spent: int = 0
    current_streak: int = 0


class ActivityReport(CamelModel):
    """Activity report for one user over a daily/weekly/monthly window."""

    username: str
    period: str
    start_date: datetime
    end_date: datetime
    summary: ReportSummary
    progress_breakdown: List[StatusBreakdown]
    topics_covered: List[TopicCovered]
