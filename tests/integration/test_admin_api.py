"""Integration tests for admin dashboard, analytics and user management."""

import pytest

from app.core.constants import Difficulty, UserRole
from app.models import Progress, User, UserStats


@pytest.fixture
def activity(client, make_user, make_topic, make_problem, auth_headers):
    """Two students with progress across two topics."""
    arrays = make_topic("Arrays", order=1)
    strings = make_topic("Strings", order=2)
    easy = make_problem(arrays, "Two Sum", Difficulty.EASY, order=1)
    medium = make_problem(arrays, "3Sum", Difficulty.MEDIUM, order=2)
    hard = make_problem(strings, "Minimum Window Substring", Difficulty.HARD, order=1)

    alice = make_user("alice")
    bob = make_user("bob")
    updates = [
        (alice, easy, "completed", 10),
        (alice, medium, "attempted", 20),
        (alice, hard, "completed", 30),
        (bob, easy, "completed", 5),
    ]
    for user, problem, status, minutes in updates:
        client.put(
            f"/api/progress/problem/{problem.id}",
            json={"status": status, "timeSpent": minutes, "confidence": 4},
            headers=auth_headers(user),
        )
    return {"alice": alice, "bob": bob}


class TestAccess:
    @pytest.mark.parametrize("path", ["/api/admin/dashboard", "/api/admin/analytics", "/api/admin/users"])
    def test_students_are_refused(self, client, student, auth_headers, path):
        resp = client.get(path, headers=auth_headers(student))
        assert resp.status_code == 403
        assert resp.json()["success"] is False

    def test_moderators_are_refused(self, client, make_user, auth_headers):
        moderator = make_user("mod", role=UserRole.MODERATOR)
        assert client.get("/api/admin/dashboard", headers=auth_headers(moderator)).status_code == 403

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/api/admin/dashboard").status_code == 401


class TestDashboard:
    def test_overview(self, client, admin, activity, auth_headers):
        data = client.get("/api/admin/dashboard", headers=auth_headers(admin)).json()["data"]
        assert data["overview"] == {
            "totalUsers": 3,
            "activeUsers": 2,
            "totalProblems": 3,
            "totalTopics": 2,
            "totalProgressRecords": 4,
            "completedProblems": 3,
            "attemptedProblems": 1,
        }
        assert data["userMetrics"]["totalTimeSpent"] == 65
        assert [u["username"] for u in data["mostActiveUsers"]][:2] == ["alice", "bob"]
        assert sum(d["count"] for d in data["dailyActivity"]) == 4

    def test_topic_popularity(self, client, admin, activity, auth_headers):
        topics = client.get("/api/admin/dashboard", headers=auth_headers(admin)).json()["data"]["topicPopularity"]
        assert topics[0]["topicName"] == "Arrays"
        assert topics[0]["totalActivity"] == 3
        assert topics[0]["completedCount"] == 2
        assert topics[0]["completionRate"] == 67

    def test_empty_platform(self, client, admin, auth_headers):
        data = client.get("/api/admin/dashboard", headers=auth_headers(admin)).json()["data"]
        assert data["overview"]["totalProgressRecords"] == 0
        assert data["topicPopularity"] == []
        assert data["dailyActivity"] == []


class TestAnalytics:
    def test_period_rollups(self, client, admin, activity, auth_headers):
        data = client.get("/api/admin/analytics", params={"period": 7}, headers=auth_headers(admin)).json()["data"]
        assert data["period"] == 7
        assert sum(d["newUsers"] for d in data["userGrowth"]) == 3
        assert sum(d["problemsSolved"] for d in data["problemActivity"]) == 3
        assert sum(d["timeSpent"] for d in data["problemActivity"]) == 65

        by_difficulty = {d["difficulty"]: d for d in data["difficultyDistribution"]}
        assert by_difficulty["Easy"]["totalAttempts"] == 2
        assert by_difficulty["Easy"]["completionRate"] == 100
        assert by_difficulty["Medium"]["completedCount"] == 0

    def test_period_bounds(self, client, admin, auth_headers):
        resp = client.get("/api/admin/analytics", params={"period": 0}, headers=auth_headers(admin))
        assert resp.status_code == 400


class TestUserManagement:
    def test_search_and_sort(self, client, admin, activity, auth_headers):
        headers = auth_headers(admin)
        body = client.get(
            "/api/admin/users",
            params={"sortBy": "totalSolved", "sortOrder": "desc"},
            headers=headers,
        ).json()
        assert [u["username"] for u in body["data"]] == ["alice", "bob", "root"]
        assert body["data"][0]["totalSolved"] == 2

        found = client.get("/api/admin/users", params={"search": "BOB"}, headers=headers).json()
        assert [u["username"] for u in found["data"]] == ["bob"]

    def test_filter_by_role(self, client, admin, activity, auth_headers):
        body = client.get("/api/admin/users", params={"role": "admin"}, headers=auth_headers(admin)).json()
        assert [u["username"] for u in body["data"]] == ["root"]

    def test_invalid_sort_column(self, client, admin, auth_headers):
        resp = client.get("/api/admin/users", params={"sortBy": "password"}, headers=auth_headers(admin))
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Invalid sortBy")

    def test_user_details(self, client, admin, activity, auth_headers):
        alice_id = activity["alice"].id
        data = client.get(f"/api/admin/users/{alice_id}", headers=auth_headers(admin)).json()["data"]
        assert data["user"]["username"] == "alice"
        assert data["progress"] == {
            "total": 3,
            "completed": 2,
            "attempted": 1,
            "percentage": 67,
            "totalTimeSpent": 60,
            "avgConfidence": 4,
        }
        assert [t["topicName"] for t in data["topicProgress"]] == ["Arrays", "Strings"]
        assert len(data["recentActivity"]) == 3

    def test_unknown_user(self, client, admin, auth_headers):
        assert client.get("/api/admin/users/999", headers=auth_headers(admin)).status_code == 404

    def test_change_role(self, client, admin, student, auth_headers):
        resp = client.put(
            f"/api/admin/users/{student.id}/role",
            json={"role": "moderator"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["role"] == "moderator"

    def test_invalid_role(self, client, admin, student, auth_headers):
        resp = client.put(
            f"/api/admin/users/{student.id}/role",
            json={"role": "owner"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400

    def test_delete_cascades(self, client, db, admin, activity, auth_headers):
        alice_id = activity["alice"].id
        resp = client.delete(f"/api/admin/users/{alice_id}", headers=auth_headers(admin))
        assert resp.status_code == 200

        db.expire_all()
        assert db.get(User, alice_id) is None
        assert db.query(Progress).filter(Progress.user_id == alice_id).count() == 0
        assert db.query(UserStats).filter(UserStats.user_id == alice_id).count() == 0

    def test_cannot_delete_self(self, client, admin, auth_headers):
        resp = client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_recompute_repairs_stale_stats(self, client, db, admin, activity, auth_headers):
        alice = activity["alice"]
        stats = db.query(UserStats).filter(UserStats.user_id == alice.id).one()
        stats.total_solved = 99
        stats.hard_solved = 0
        db.commit()

        resp = client.post(f"/api/admin/users/{alice.id}/recompute-stats", headers=auth_headers(admin))
        data = resp.json()["data"]
        assert data["totalSolved"] == 2
        assert data["easySolved"] == 1
        assert data["hardSolved"] == 1
        assert data["totalTimeSpent"] == 60
