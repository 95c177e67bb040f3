"""
Database initialization and seeding.
"""
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import Difficulty, TopicDifficulty, UserRole
from app.core.security import get_password_hash
from app.models.problem import Problem
from app.models.topic import Topic
from app.models.user import User, UserStats
from app.utils.helpers import generate_slug

logger = logging.getLogger(__name__)

# (title, description, difficulty, estimated hours, tags, problems)
# problem: (title, difficulty, leetcode slug, companies)
SAMPLE_CURRICULUM = [
    (
        "Arrays",
        "Master array manipulation, searching, sorting, and common patterns",
        TopicDifficulty.BEGINNER,
        20,
        ["fundamentals", "must-know"],
        [
            ("Two Sum", Difficulty.EASY, "two-sum", ["Google", "Amazon"]),
            ("Best Time to Buy and Sell Stock", Difficulty.EASY, "best-time-to-buy-and-sell-stock", ["Amazon"]),
            ("Product of Array Except Self", Difficulty.MEDIUM, "product-of-array-except-self", ["Meta"]),
            ("Trapping Rain Water", Difficulty.HARD, "trapping-rain-water", ["Google", "Goldman Sachs"]),
        ],
    ),
    (
        "Strings",
        "String manipulation, pattern matching, and text processing algorithms",
        TopicDifficulty.BEGINNER,
        15,
        ["fundamentals"],
        [
            ("Valid Anagram", Difficulty.EASY, "valid-anagram", ["Amazon"]),
            ("Longest Substring Without Repeating Characters", Difficulty.MEDIUM,
             "longest-substring-without-repeating-characters", ["Amazon", "Bloomberg"]),
            ("Minimum Window Substring", Difficulty.HARD, "minimum-window-substring", ["Meta"]),
        ],
    ),
    (
        "Linked Lists",
        "Singly and doubly linked lists, pointer manipulation and cycle detection",
        TopicDifficulty.INTERMEDIATE,
        12,
        ["pointers"],
        [
            ("Reverse Linked List", Difficulty.EASY, "reverse-linked-list", ["Microsoft"]),
            ("Linked List Cycle", Difficulty.EASY, "linked-list-cycle", ["Amazon"]),
            ("Merge k Sorted Lists", Difficulty.HARD, "merge-k-sorted-lists", ["Google"]),
        ],
    ),
    (
        "Dynamic Programming",
        "Memoization, tabulation and classic optimization problems",
        TopicDifficulty.ADVANCED,
        30,
        ["optimization", "must-know"],
        [
            ("Climbing Stairs", Difficulty.EASY, "climbing-stairs", ["Adobe"]),
            ("Coin Change", Difficulty.MEDIUM, "coin-change", ["Amazon"]),
            ("Edit Distance", Difficulty.HARD, "edit-distance", ["Google"]),
        ],
    ),
]


def seed_admin(db: Session) -> User:
    """Create the admin account from settings if it does not exist."""
    admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
    if admin:
        return admin

    admin = User(
        email=settings.ADMIN_EMAIL,
        username="admin",
        full_name="System Administrator",
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        role=UserRole.ADMIN.value,
        is_active=True,
    )
    admin.stats = UserStats()
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Admin user {admin.email} created")
    return admin


def seed_curriculum(db: Session) -> int:
    """Insert the sample topics and problems, skipping topics that already exist."""
    created = 0
    for order, (title, description, difficulty, hours, tags, problems) in enumerate(SAMPLE_CURRICULUM, start=1):
        slug = generate_slug(title)
        if db.query(Topic.id).filter(Topic.slug == slug).first():
            continue

        topic = Topic(
            title=title,
            slug=slug,
            description=description,
            order=order,
            difficulty=difficulty.value,
            estimated_hours=hours,
            tags=tags,
            resources=[],
            total_problems=len(problems),
        )
        for position, (problem_title, problem_difficulty, leetcode, companies) in enumerate(problems, start=1):
            topic.problems.append(Problem(
                title=problem_title,
                description=f"Solve '{problem_title}'.",
                difficulty=problem_difficulty.value,
                order=position,
                companies=companies,
                links={"leetcode": f"https://leetcode.com/problems/{leetcode}/"},
            ))
        db.add(topic)
        created += 1

    db.commit()
    logger.info(f"Seeded {created} topics")
    return created


def init_db(db: Session) -> None:
    """
    Initialize database with default data.

    Args:
        db: Database session
    """
    seed_admin(db)
    seed_curriculum(db)
