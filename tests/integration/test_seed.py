"""Integration tests for database seeding."""

from app.core.config import settings
from app.db.init_db import SAMPLE_CURRICULUM, init_db
from app.models import Problem, Topic, User


class TestInitDb:
    def test_seeds_admin_and_curriculum(self, db):
        init_db(db)

        admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).one()
        assert admin.role == "admin"
        assert admin.stats is not None

        topics = db.query(Topic).order_by(Topic.order).all()
        assert [t.title for t in topics] == [entry[0] for entry in SAMPLE_CURRICULUM]
        for topic in topics:
            assert topic.total_problems == db.query(Problem).filter(Problem.topic_id == topic.id).count()

    def test_is_idempotent(self, db):
        init_db(db)
        init_db(db)

        assert db.query(User).count() == 1
        assert db.query(Topic).count() == len(SAMPLE_CURRICULUM)

    def test_seeded_admin_can_log_in(self, client, db):
        init_db(db)
        resp = client.post(
            "/api/auth/login",
            data={"username": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["role"] == "admin"
