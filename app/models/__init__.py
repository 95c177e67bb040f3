"""Models module - Import all models here for Alembic."""
from app.db.base import Base
from app.models.user import User, UserStats
from app.models.topic import Topic
from app.models.problem import Problem
from app.models.progress import Progress

__all__ = ["Base", "User", "UserStats", "Topic", "Problem", "Progress"]
