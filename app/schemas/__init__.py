"""Schemas module - Import all schemas."""
from app.schemas.common import (
    CamelModel,
    DataResponse,
    ErrorResponse,
    Message,
    PaginatedResponse,
    Pagination,
)
from app.schemas.progress import (
    ActivityReport,
    CompletionStats,
    ProgressCreateRequest,
    ProgressOverview,
    ProgressStats,
    ProgressUpdateRequest,
    RecentActivity,
    StreakInfo,
    TopicProgress,
    UserStatsSchema,
)
from app.schemas.user import User, UserCreate, UserUpdate, Token, AuthResponse
from app.schemas.topic import (
    Problem,
    ProblemCreate,
    ProblemUpdate,
    Topic,
    TopicCreate,
    TopicDetailedProgress,
    TopicUpdate,
)
from app.schemas.leaderboard import Achievement, LeaderboardEntry, LeaderboardStats
from app.schemas.admin import AdminDashboard, AdminUserDetails, PlatformAnalytics

__all__ = [
    "CamelModel",
    "DataResponse",
    "ErrorResponse",
    "Message",
    "PaginatedResponse",
    "Pagination",
    "ActivityReport",
    "CompletionStats",
    "ProgressCreateRequest",
    "ProgressOverview",
    "ProgressStats",
    "ProgressUpdateRequest",
    "RecentActivity",
    "StreakInfo",
    "TopicProgress",
    "UserStatsSchema",
    "User",
    "UserCreate",
    "UserUpdate",
    "Token",
    "AuthResponse",
    "Problem",
    "ProblemCreate",
    "ProblemUpdate",
    "Topic",
    "TopicCreate",
    "TopicDetailedProgress",
    "TopicUpdate",
    "Achievement",
    "LeaderboardEntry",
    "LeaderboardStats",
    "AdminDashboard",
    "AdminUserDetails",
    "PlatformAnalytics",
]
