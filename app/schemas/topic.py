"""
Pydantic schemas for Topic and Problem models.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.core.constants import Difficulty, TopicDifficulty
from app.schemas.common import CamelModel
from app.schemas.progress import CompletionStats

RESOURCE_TYPE_PATTERN = "^(video|article|book|course)$"


class Resource(CamelModel):
    """Learning resource attached to a topic."""

    type: str = Field(..., pattern=RESOURCE_TYPE_PATTERN)
    title: str
    url: str
    is_premium: bool = False
    author: Optional[str] = None
    duration: Optional[int] = None  # minutes


class ProblemLinks(CamelModel):
    leetcode: Optional[str] = None
    codeforces: Optional[str] = None
    youtube: Optional[str] = None
    article: Optional[str] = None
    solution: Optional[str] = None
    editorial: Optional[str] = None


# ============= Topics =============

class TopicCreate(CamelModel):
    """Schema for topic creation."""

    title: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    icon: Optional[str] = None
    order: int = 0
    difficulty: TopicDifficulty = TopicDifficulty.BEGINNER
    estimated_hours: int = Field(10, ge=0)
    tags: List[str] = []
    resources: List[Resource] = []


class TopicUpdate(CamelModel):
    """Schema for topic update; omitted fields are left alone."""

    title: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=500)
    icon: Optional[str] = None
    order: Optional[int] = None
    difficulty: Optional[TopicDifficulty] = None
    estimated_hours: Optional[int] = Field(None, ge=0)
    tags: Optional[List[str]] = None
    resources: Optional[List[Resource]] = None
    is_active: Optional[bool] = None


class Topic(CamelModel):
    """Schema for topic response."""

    id: int
    title: str
    slug: str
    description: str
    icon: Optional[str] = None
    order: int
    difficulty: str
    total_problems: int = 0
    estimated_hours: Optional[int] = None
    tags: List[str] = []
    resources: List[Resource] = []
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TopicBrief(CamelModel):
    id: int
    title: str
    slug: str


# ============= Problems =============

class ProblemCreate(CamelModel):
    """Schema for problem creation."""

    topic_id: int
    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=1)
    difficulty: Difficulty
    order: int = 0
    tags: List[str] = []
    companies: List[str] = []
    frequency: int = Field(0, ge=0, le=100)
    links: ProblemLinks = ProblemLinks()
    hints: List[str] = []
    estimated_time: int = Field(30, ge=5, le=180)
    concepts: List[str] = []


class ProblemUpdate(CamelModel):
    """Schema for problem update; omitted fields are left alone."""

    topic_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    difficulty: Optional[Difficulty] = None
    order: Optional[int] = None
    tags: Optional[List[str]] = None
    companies: Optional[List[str]] = None
    frequency: Optional[int] = Field(None, ge=0, le=100)
    links: Optional[ProblemLinks] = None
    hints: Optional[List[str]] = None
    estimated_time: Optional[int] = Field(None, ge=5, le=180)
    concepts: Optional[List[str]] = None
    is_active: Optional[bool] = None


class Problem(CamelModel):
    """Schema for problem response."""

    id: int
    topic_id: int
    title: str
    description: str
    difficulty: str
    order: int
    tags: List[str] = []
    companies: List[str] = []
    frequency: Optional[int] = 0
    links: ProblemLinks = ProblemLinks()
    hints: List[str] = []
    estimated_time: Optional[int] = 30
    concepts: List[str] = []
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProblemWithStatus(Problem):
    """Problem annotated with the caller's status ('pending' when anonymous)."""

    user_status: str = "pending"


class ProblemProgress(CamelModel):
    """The caller's progress on one problem."""

    status: str = "pending"
    time_spent: int = 0
    attempts: int = 0
    confidence: Optional[int] = None
    is_bookmarked: bool = False
    notes: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    last_attempt_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None


class ProblemDetail(Problem):
    """Problem with its topic and, for authenticated callers, their progress."""

    topic: Optional[TopicBrief] = None
    user_progress: Optional[ProblemProgress] = None


class ProblemWithProgress(Problem):
    """Problem joined with the caller's progress row (pending if none)."""

    progress: ProblemProgress = ProblemProgress()


class TopicWithProblems(Topic):
    problems: List[Problem] = []


class TopicDetailedProgress(CamelModel):
    """One topic, its problems with the caller's progress, and a summary."""

    topic: Topic
    problems: List[ProblemWithProgress]
    summary: CompletionStats
