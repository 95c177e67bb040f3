"""
Problem model - static practice content belonging to one topic.
"""
from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Problem(Base):
    """Problem model."""

    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    difficulty = Column(String, nullable=False, index=True)  # Easy, Medium, Hard
    order = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    companies = Column(JSON, nullable=False, default=list)
    frequency = Column(Integer, default=0)  # 0-100
    links = Column(JSON, nullable=False, default=dict)  # leetcode, codeforces, youtube, article, ...
    hints = Column(JSON, nullable=False, default=list)
    estimated_time = Column(Integer, default=30)  # minutes
    concepts = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    topic = relationship("Topic", back_populates="problems")

    __table_args__ = (Index("ix_problems_topic_order", "topic_id", "order"),)
