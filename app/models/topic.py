"""
Topic model - a unit of curriculum with an ordered problem list.
"""
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Topic(Base):
    """Topic model."""

    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String, default="default-icon")
    order = Column(Integer, nullable=False, default=0, index=True)
    difficulty = Column(String, default="Beginner")  # Beginner, Intermediate, Advanced
    total_problems = Column(Integer, default=0)  # active problems, refreshed on problem writes
    estimated_hours = Column(Integer, default=10)
    tags = Column(JSON, nullable=False, default=list)
    resources = Column(JSON, nullable=False, default=list)  # [{type, title, url, isPremium, ...}]
    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    problems = relationship("Problem", back_populates="topic", order_by="Problem.order")
