"""
API endpoints for topics and their problems.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import Difficulty
from app.core.dependencies import get_optional_user
from app.core.permissions import require_admin, require_staff
from app.db.base import get_db
from app.models.problem import Problem
from app.models.progress import Progress
from app.models.topic import Topic
from app.models.user import User
from app.schemas.common import DataResponse, Message, PaginatedResponse
from app.schemas.topic import (
    Problem as ProblemSchema,
    ProblemCreate,
    ProblemDetail,
    ProblemProgress,
    ProblemUpdate,
    ProblemWithStatus,
    Resource,
    Topic as TopicSchema,
    TopicCreate,
    TopicUpdate,
    TopicWithProblems,
)
from app.utils.helpers import generate_slug, pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter()


# ============= Helpers =============

def _get_topic_by_slug(db: Session, slug: str) -> Topic:
    topic = db.query(Topic).filter(Topic.slug == slug, Topic.is_active == True).first()  # noqa: E712
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")
    return topic


def _get_problem(db: Session, problem_id: int, active_only: bool = True) -> Problem:
    query = db.query(Problem).filter(Problem.id == problem_id)
    if active_only:
        query = query.filter(Problem.is_active == True)  # noqa: E712
    problem = query.first()
    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")
    return problem


def _unique_slug(db: Session, title: str, topic_id: Optional[int] = None) -> str:
    base = generate_slug(title) or "topic"
    slug = base
    suffix = 2
    while True:
        query = db.query(Topic.id).filter(Topic.slug == slug)
        if topic_id is not None:
            query = query.filter(Topic.id != topic_id)
        if query.first() is None:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


def _refresh_problem_count(db: Session, topic_id: int) -> None:
    """Recount a topic's active problems into Topic.total_problems."""
    count = db.query(func.count(Problem.id)).filter(
        Problem.topic_id == topic_id,
        Problem.is_active == True,  # noqa: E712
    ).scalar()
    db.query(Topic).filter(Topic.id == topic_id).update(
        {Topic.total_problems: count or 0}, synchronize_session="fetch"
    )


def _status_map(db: Session, user: Optional[User], problem_ids: List[int]) -> Dict[int, str]:
    if user is None or not problem_ids:
        return {}
    rows = db.query(Progress.problem_id, Progress.status).filter(
        Progress.user_id == user.id,
        Progress.problem_id.in_(problem_ids),
    ).all()
    return {problem_id: status for problem_id, status in rows}


# ============= Problems =============

@router.get("/problems/all", response_model=PaginatedResponse[ProblemWithStatus])
def list_all_problems(
    difficulty: Optional[Difficulty] = None,
    tags: Optional[str] = Query(None, description="Comma-separated tags; any match"),
    company: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """
    List active problems across all topics.

    Difficulty and search are applied in SQL; tag and company filters match
    against the JSON lists.
    """
    query = db.query(Problem).filter(Problem.is_active == True)  # noqa: E712
    if difficulty:
        query = query.filter(Problem.difficulty == difficulty.value)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Problem.title.ilike(pattern), Problem.description.ilike(pattern)))

    problems = query.order_by(Problem.topic_id, Problem.order, Problem.id).all()

    if tags:
        wanted = {t.strip().lower() for t in tags.split(",") if t.strip()}
        problems = [p for p in problems if wanted & {t.lower() for t in (p.tags or [])}]
    if company:
        company = company.lower()
        problems = [p for p in problems if company in {c.lower() for c in (p.companies or [])}]

    total = len(problems)
    page_items = problems[(page - 1) * limit: page * limit]
    statuses = _status_map(db, current_user, [int(p.id) for p in page_items])  # type: ignore

    data = [
        ProblemWithStatus.model_validate(p).model_copy(
            update={"user_status": statuses.get(int(p.id), "pending")}  # type: ignore
        )
        for p in page_items
    ]
    return {"data": data, "pagination": pagination_meta(page, limit, total)}


@router.get("/problems/{problem_id}", response_model=DataResponse[ProblemDetail])
def get_problem(
    problem_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """Get one problem with its topic and, when authenticated, the caller's progress."""
    problem = _get_problem(db, problem_id)

    user_progress = None
    if current_user is not None:
        progress = db.query(Progress).filter(
            Progress.user_id == current_user.id,
            Progress.problem_id == problem.id,
        ).first()
        if progress:
            user_progress = ProblemProgress.model_validate(progress)

    detail = ProblemDetail.model_validate(problem).model_copy(update={"user_progress": user_progress})
    return {"data": detail}


@router.post("/problems", response_model=DataResponse[ProblemSchema], status_code=status.HTTP_201_CREATED)
def create_problem(
    problem_in: ProblemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> Any:
    """Create a problem (admin or moderator) and refresh its topic's problem count."""
    topic = db.query(Topic).filter(Topic.id == problem_in.topic_id).first()
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    problem = Problem(**problem_in.model_dump(exclude={"difficulty", "links"}))
    problem.difficulty = problem_in.difficulty.value  # type: ignore
    problem.links = problem_in.links.model_dump(exclude_none=True)  # type: ignore
    db.add(problem)
    db.flush()
    _refresh_problem_count(db, int(topic.id))  # type: ignore
    db.commit()
    db.refresh(problem)

    logger.info(f"User {current_user.id} created problem {problem.id} in topic {topic.id}")
    return {"message": "Problem created successfully", "data": ProblemSchema.model_validate(problem)}


@router.put("/problems/{problem_id}", response_model=DataResponse[ProblemSchema])
def update_problem(
    problem_id: int,
    problem_in: ProblemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> Any:
    """Update a problem (admin or moderator); counts of old and new topic are refreshed."""
    problem = _get_problem(db, problem_id, active_only=False)
    old_topic_id = int(problem.topic_id)  # type: ignore

    changes = problem_in.model_dump(exclude_unset=True)
    if "topic_id" in changes:
        if not db.query(Topic.id).filter(Topic.id == changes["topic_id"]).first():
            raise HTTPException(status_code=404, detail="Topic not found")
    if changes.get("difficulty") is not None:
        changes["difficulty"] = problem_in.difficulty.value  # type: ignore
    if "links" in changes and problem_in.links is not None:
        changes["links"] = problem_in.links.model_dump(exclude_none=True)

    for field, value in changes.items():
        if value is not None:
            setattr(problem, field, value)

    db.flush()
    _refresh_problem_count(db, old_topic_id)
    if int(problem.topic_id) != old_topic_id:  # type: ignore
        _refresh_problem_count(db, int(problem.topic_id))  # type: ignore
    db.commit()
    db.refresh(problem)

    return {"message": "Problem updated successfully", "data": ProblemSchema.model_validate(problem)}


@router.delete("/problems/{problem_id}", response_model=Message)
def delete_problem(
    problem_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Soft-delete a problem (admin). Progress rows referencing it are kept."""
    problem = _get_problem(db, problem_id)
    problem.is_active = False  # type: ignore
    db.flush()
    _refresh_problem_count(db, int(problem.topic_id))  # type: ignore
    db.commit()

    logger.info(f"User {current_user.id} deleted problem {problem_id}")
    return {"message": "Problem deleted successfully"}


# ============= Topics =============

@router.get("/", response_model=PaginatedResponse[TopicSchema])
def list_topics(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Any:
    """List active topics in curriculum order."""
    query = db.query(Topic).filter(Topic.is_active == True)  # noqa: E712
    total = query.count()
    topics = query.order_by(Topic.order, Topic.id).offset((page - 1) * limit).limit(limit).all()
    return {
        "data": [TopicSchema.model_validate(t) for t in topics],
        "pagination": pagination_meta(page, limit, total),
    }


@router.get("/{slug}", response_model=DataResponse[TopicWithProblems])
def get_topic(slug: str, db: Session = Depends(get_db)) -> Any:
    """Get a topic with its active problems."""
    topic = _get_topic_by_slug(db, slug)
    problems = [ProblemSchema.model_validate(p) for p in topic.problems if p.is_active]
    data = TopicWithProblems.model_validate(topic).model_copy(update={"problems": problems})
    return {"data": data}


@router.get("/{slug}/problems", response_model=PaginatedResponse[ProblemWithStatus])
def get_topic_problems(
    slug: str,
    difficulty: Optional[Difficulty] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """List a topic's active problems, each with the caller's status."""
    topic = _get_topic_by_slug(db, slug)

    query = db.query(Problem).filter(
        Problem.topic_id == topic.id,
        Problem.is_active == True,  # noqa: E712
    )
    if difficulty:
        query = query.filter(Problem.difficulty == difficulty.value)

    total = query.count()
    problems = query.order_by(Problem.order, Problem.id).offset((page - 1) * limit).limit(limit).all()
    statuses = _status_map(db, current_user, [int(p.id) for p in problems])  # type: ignore

    data = [
        ProblemWithStatus.model_validate(p).model_copy(
            update={"user_status": statuses.get(int(p.id), "pending")}  # type: ignore
        )
        for p in problems
    ]
    return {"data": data, "pagination": pagination_meta(page, limit, total)}


@router.get("/{slug}/resources", response_model=DataResponse[List[Resource]])
def get_topic_resources(slug: str, db: Session = Depends(get_db)) -> Any:
    """Learning resources attached to a topic."""
    topic = _get_topic_by_slug(db, slug)
    return {"data": topic.resources or []}


@router.post("/", response_model=DataResponse[TopicSchema], status_code=status.HTTP_201_CREATED)
def create_topic(
    topic_in: TopicCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Create a topic (admin). The slug is generated from the title."""
    topic = Topic(
        title=topic_in.title,
        slug=_unique_slug(db, topic_in.title),
        description=topic_in.description,
        order=topic_in.order,
        difficulty=topic_in.difficulty.value,
        estimated_hours=topic_in.estimated_hours,
        tags=topic_in.tags,
        resources=[r.model_dump(by_alias=True, exclude_none=True) for r in topic_in.resources],
        total_problems=0,
    )
    if topic_in.icon:
        topic.icon = topic_in.icon  # type: ignore
    db.add(topic)
    db.commit()
    db.refresh(topic)

    logger.info(f"User {current_user.id} created topic {topic.id} ({topic.slug})")
    return {"message": "Topic created successfully", "data": TopicSchema.model_validate(topic)}


@router.put("/{topic_id}", response_model=DataResponse[TopicSchema])
def update_topic(
    topic_id: int,
    topic_in: TopicUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Update a topic (admin). A changed title regenerates the slug."""
    topic = db.query(Topic).filter(Topic.id == topic_id).first()
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    changes = topic_in.model_dump(exclude_unset=True, exclude_none=True)
    if "title" in changes and changes["title"] != topic.title:
        topic.slug = _unique_slug(db, changes["title"], topic_id=topic_id)  # type: ignore
    if "difficulty" in changes:
        changes["difficulty"] = topic_in.difficulty.value  # type: ignore
    if "resources" in changes:
        changes["resources"] = [
            r.model_dump(by_alias=True, exclude_none=True) for r in topic_in.resources or []
        ]

    for field, value in changes.items():
        setattr(topic, field, value)

    db.commit()
    db.refresh(topic)
    return {"message": "Topic updated successfully", "data": TopicSchema.model_validate(topic)}


@router.delete("/{topic_id}", response_model=Message)
def delete_topic(
    topic_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Soft-delete a topic (admin)."""
    topic = db.query(Topic).filter(Topic.id == topic_id).first()
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    topic.is_active = False  # type: ignore
    db.commit()

    logger.info(f"User {current_user.id} deleted topic {topic_id}")
    return {"message": "Topic deleted successfully"}
