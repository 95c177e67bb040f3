"""
Pydantic schemas for leaderboard, achievements and community endpoints.
"""
from typing import List, Optional

from app.schemas.common import CamelModel
from app.schemas.progress import UserStatsSchema


class LeaderboardEntry(CamelModel):
    id: int
    rank: int
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    stats: UserStatsSchema
    achievements: List[str] = []
    is_current_user: bool = False


class UserRank(CamelModel):
    category: str
    rank: int
    total: int


class Achievement(CamelModel):
    name: str
    description: str
    icon: str
    threshold: int
    unlocked: bool = False


class TopPerformer(CamelModel):
    username: Optional[str] = None
    problems_solved: int = 0


class LongestStreakHolder(CamelModel):
    username: Optional[str] = None
    streak: int = 0


class LeaderboardStats(CamelModel):
    total_users: int
    active_users: int
    top_performer: TopPerformer
    longest_streak: LongestStreakHolder


class MemberStats(CamelModel):
    total_solved: int = 0
    streak: int = 0


class CommunityMember(CamelModel):
    id: int
    username: str
    avatar_url: Optional[str] = None
    role: str
    stats: MemberStats
    is_online: bool = False


class CommunityStats(CamelModel):
    total_members: int
    active_today: int
    online_now: int
