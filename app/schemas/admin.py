"""
Pydantic schemas for admin dashboard, analytics and user management.
"""
from datetime import datetime
from typing import List, Optional

from app.schemas.common import CamelModel
from app.schemas.progress import CompletionStats, RecentActivity, TopicProgress
from app.schemas.user import User


class PlatformOverview(CamelModel):
    total_users: int = 0
    active_users: int = 0
    total_problems: int = 0
    total_topics: int = 0
    total_progress_records: int = 0
    completed_problems: int = 0
    attempted_problems: int = 0


class UserMetrics(CamelModel):
    avg_problems_solved: float = 0
    avg_streak: float = 0
    avg_time_spent: float = 0
    total_time_spent: int = 0


class AdminUserSummary(CamelModel):
    id: int
    username: str
    email: str
    full_name: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    last_active_date: Optional[datetime] = None
    total_solved: int = 0
    streak: int = 0


class TopicEngagement(CamelModel):
    topic_id: int
    topic_name: str
    total_activity: int
    completed_count: int
    completion_rate: int
    avg_time_spent: float = 0


class DailyCount(CamelModel):
    date: str
    count: int


class DailyProblemActivity(CamelModel):
    date: str
    problems_solved: int
    problems_attempted: int
    time_spent: int


class DailyUserGrowth(CamelModel):
    date: str
    new_users: int


class DifficultyStats(CamelModel):
    difficulty: str
    total_attempts: int
    completed_count: int
    completion_rate: int
    avg_time_spent: float = 0


class AdminDashboard(CamelModel):
    overview: PlatformOverview
    user_metrics: UserMetrics
    recent_users: List[AdminUserSummary]
    most_active_users: List[AdminUserSummary]
    topic_popularity: List[TopicEngagement]
    daily_activity: List[DailyCount]


class PlatformAnalytics(CamelModel):
    period: int
    user_growth: List[DailyUserGrowth]
    problem_activity: List[DailyProblemActivity]
    topic_engagement: List[TopicEngagement]
    difficulty_distribution: List[DifficultyStats]


class AdminProgressSummary(CompletionStats):
    total_time_spent: int = 0
    avg_confidence: int = 0


class AdminUserDetails(CamelModel):
    user: User
    progress: AdminProgressSummary
    topic_progress: List[TopicProgress]
    recent_activity: List[RecentActivity]
    activity_timeline: List[DailyProblemActivity]
