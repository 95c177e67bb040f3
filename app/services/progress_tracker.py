"""
Progress upserts: one row per (user, problem), mutated in place.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import ProgressStatus
from app.models.problem import Problem
from app.models.progress import Progress

logger = logging.getLogger(__name__)


@dataclass
class ProgressUpdate:
    status: str
    time_spent: Optional[int] = None
    confidence: Optional[int] = None
    notes: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    is_bookmarked: Optional[bool] = None


def _apply(progress: Progress, update: ProgressUpdate, now: datetime) -> None:
    progress.status = update.status  # type: ignore
    if update.time_spent is not None:
        progress.time_spent = update.time_spent  # type: ignore
    if update.confidence is not None:
        progress.confidence = update.confidence  # type: ignore
    if update.notes is not None:
        progress.notes = update.notes  # type: ignore
    if update.code is not None:
        progress.code = update.code  # type: ignore
    if update.language is not None:
        progress.language = update.language  # type: ignore
    if update.is_bookmarked is not None:
        progress.is_bookmarked = update.is_bookmarked  # type: ignore
    progress.attempts = (progress.attempts or 0) + 1  # type: ignore
    progress.last_attempt_date = now  # type: ignore
    progress.updated_at = now  # type: ignore
    if update.status == ProgressStatus.COMPLETED.value and progress.completed_date is None:
        progress.completed_date = now  # type: ignore


def _find(db: Session, user_id: int, problem_id: int) -> Optional[Progress]:
    return db.query(Progress).filter(
        Progress.user_id == user_id,
        Progress.problem_id == problem_id,
    ).first()


def upsert_progress(db: Session, user_id: int, problem: Problem, update: ProgressUpdate) -> Progress:
    """
    Create or update the user's progress row for a problem and commit it.

    A concurrent insert for the same pair surfaces as an IntegrityError on
    the unique constraint; the insert is then replayed as an update of the
    row that won, so the later write wins instead of failing.
    """
    now = datetime.now()
    progress = _find(db, user_id, int(problem.id))  # type: ignore

    if progress is None:
        progress = Progress(
            user_id=user_id,
            problem_id=problem.id,
            topic_id=problem.topic_id,
            time_spent=0,
            attempts=0,
        )
        _apply(progress, update, now)
        db.add(progress)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Concurrent progress insert for user {user_id}, problem {problem.id}; retrying as update"
            )
            progress = _find(db, user_id, int(problem.id))  # type: ignore
            if progress is None:
                raise
            _apply(progress, update, now)
            db.commit()
    else:
        _apply(progress, update, now)
        db.commit()

    db.refresh(progress)
    return progress


def reset_progress(db: Session, user_id: int, problem_id: int) -> bool:
    """Delete the user's row for a problem. Returns False if there was none."""
    progress = _find(db, user_id, problem_id)
    if progress is None:
        return False
    db.delete(progress)
    db.commit()
    return True
