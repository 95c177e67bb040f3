"""
Progress model - one row per (user, problem) pair.
"""
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Progress(Base):
    """Per-user, per-problem progress fact row."""

    __tablename__ = "progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="SET NULL"), nullable=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True)

    status = Column(String, nullable=False, default="pending")  # pending, attempted, completed, revisit
    notes = Column(Text, nullable=True)
    code = Column(Text, nullable=True)
    language = Column(String, default="javascript")
    time_spent = Column(Integer, nullable=False, default=0)  # minutes
    attempts = Column(Integer, nullable=False, default=0)
    last_attempt_date = Column(DateTime(timezone=True), default=datetime.now)
    completed_date = Column(DateTime(timezone=True), nullable=True)  # first transition into completed
    confidence = Column(Integer, default=3)  # 1-5 scale
    is_bookmarked = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # Python-side clock so recent-activity ordering has sub-second resolution
    updated_at = Column(DateTime(timezone=True), default=datetime.now, onupdate=datetime.now)

    # Relationships
    user = relationship("User", back_populates="progress")
    problem = relationship("Problem")
    topic = relationship("Topic")

    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="uq_progress_user_problem"),
        Index("ix_progress_user_status", "user_id", "status"),
        Index("ix_progress_user_topic", "user_id", "topic_id"),
    )
