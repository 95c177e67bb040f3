"""
Pydantic schemas for User and UserStats models.
"""
import re
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, validator

from app.core.constants import UserRole
from app.schemas.common import CamelModel
from app.schemas.progress import RecentActivity, UserStatsSchema

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")


def _check_username(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not USERNAME_PATTERN.match(v):
        raise ValueError(
            "Username must be 3-20 characters of letters, numbers and underscores"
        )
    return v.lower()


def _check_password(v: str) -> str:
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    return v


class UserPreferences(CamelModel):
    """User-facing preferences stored as JSON on the user."""

    theme: str = Field("system", pattern="^(light|dark|system)$")
    difficulty: str = Field("all", pattern="^(all|easy|medium|hard)$")
    daily_goal: int = Field(3, ge=1, le=20)
    email_notifications: bool = True


class PreferencesUpdate(CamelModel):
    """Partial preferences update."""

    theme: Optional[str] = Field(None, pattern="^(light|dark|system)$")
    difficulty: Optional[str] = Field(None, pattern="^(all|easy|medium|hard)$")
    daily_goal: Optional[int] = Field(None, ge=1, le=20)
    email_notifications: Optional[bool] = None


class UserBase(CamelModel):
    """Base user schema."""

    email: EmailStr
    username: str
    full_name: str = Field(..., min_length=2, max_length=50)


class UserCreate(UserBase):
    """Schema for user registration."""

    password: str

    @validator("username")
    def validate_username(cls, v):
        return _check_username(v)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower()

    @validator("password")
    def validate_password(cls, v):
        return _check_password(v)


class UserUpdate(CamelModel):
    """Schema for profile update."""

    email: Optional[EmailStr] = None
    username: Optional[str] = None
    full_name: Optional[str] = Field(None, min_length=2, max_length=50)

    @validator("username")
    def validate_username(cls, v):
        return _check_username(v)

    @validator("email")
    def normalize_email(cls, v):
        return v.lower() if v else v


class PasswordUpdate(CamelModel):
    """Schema for password change."""

    current_password: str
    new_password: str

    @validator("new_password")
    def validate_password(cls, v):
        return _check_password(v)


class RoleUpdate(CamelModel):
    """Schema for an admin role change."""

    role: UserRole


class UserInDB(UserBase):
    """Schema for user in database."""

    id: int
    role: str
    avatar_url: Optional[str] = None
    preferences: UserPreferences
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class User(UserInDB):
    """Schema for user response."""

    stats: Optional[UserStatsSchema] = None


class PublicProfile(CamelModel):
    """What other users can see of a profile."""

    username: str
    full_name: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    stats: Optional[UserStatsSchema] = None
    recent_activity: List[RecentActivity] = []


class Token(CamelModel):
    """Schema for JWT token pair."""

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


class AuthResponse(Token):
    """Token pair plus the authenticated user."""

    user: User


class RefreshRequest(CamelModel):
    """Schema for token refresh."""

    refresh_token: str
