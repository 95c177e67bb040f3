"""Application-wide constants.

Enumerations stored in the database and fixed catalogs shared by the
API and the services. Values that need to be configurable at runtime go
in config.py instead.
"""
from enum import Enum


class ProgressStatus(str, Enum):
    PENDING = "pending"
    ATTEMPTED = "attempted"
    COMPLETED = "completed"
    REVISIT = "revisit"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class TopicDifficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class UserRole(str, Enum):
    STUDENT = "student"
    MODERATOR = "moderator"
    ADMIN = "admin"


class Language(str, Enum):
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    GO = "go"
    RUST = "rust"


class LeaderboardCategory(str, Enum):
    PROBLEMS = "problems"
    STREAK = "streak"
    TIME = "time"


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# ===================
# Progress
# ===================

# Statuses that count as a day of activity for streaks
ACTIVE_STATUSES = (
    ProgressStatus.ATTEMPTED.value,
    ProgressStatus.COMPLETED.value,
    ProgressStatus.REVISIT.value,
)

MIN_CONFIDENCE = 1
MAX_CONFIDENCE = 5
DEFAULT_CONFIDENCE = 3
MAX_NOTES_LENGTH = 2000

# Days covered by the heatmap when no range is given
DEFAULT_HEATMAP_DAYS = 365

REPORT_PERIOD_DAYS = {
    ReportPeriod.DAILY: 1,
    ReportPeriod.WEEKLY: 7,
    ReportPeriod.MONTHLY: 30,
}


# ===================
# Community
# ===================

ONLINE_WINDOW_MINUTES = 5


# ===================
# Achievements
# ===================

# (name, description, icon, stat field, threshold)
ACHIEVEMENTS = [
    ("First Problem", "Solved your first problem", "🎯", "total_solved", 1),
    ("Getting Started", "Solved 10 problems", "🚀", "total_solved", 10),
    ("Problem Solver", "Solved 50 problems", "🏆", "total_solved", 50),
    ("Century Club", "Solved 100 problems", "💎", "total_solved", 100),
    ("Week Warrior", "Maintained a 7-day streak", "🔥", "streak", 7),
    ("Monthly Master", "Maintained a 30-day streak", "👑", "streak", 30),
]
