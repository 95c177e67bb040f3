"""Integration tests for the leaderboard and community endpoints."""

from datetime import datetime, timedelta

import pytest


@pytest.fixture
def set_stats(db):
    """Overwrite fields of a user's stats snapshot."""

    def _set_stats(user, **fields):
        for field, value in fields.items():
            setattr(user.stats, field, value)
        db.commit()
        return user

    return _set_stats


@pytest.fixture
def ranked(make_user, set_stats):
    now = datetime.now()
    alice = set_stats(make_user("alice"), total_solved=5, streak=2, longest_streak=2, last_active_date=now)
    bob = set_stats(make_user("bob"), total_solved=10, streak=1, longest_streak=4, total_time_spent=30)
    carol = set_stats(make_user("carol"), total_solved=5, streak=8, longest_streak=9, total_time_spent=300)
    set_stats(make_user("dave", is_active=False), total_solved=50, streak=40, longest_streak=40)
    return {"alice": alice, "bob": bob, "carol": carol}


class TestLeaderboard:
    def test_ranked_by_problems_with_streak_tiebreak(self, client, ranked):
        body = client.get("/api/leaderboard/").json()
        assert [(e["rank"], e["username"]) for e in body["data"]] == [(1, "bob"), (2, "carol"), (3, "alice")]
        assert body["pagination"]["total"] == 3

    def test_inactive_users_are_hidden(self, client, ranked):
        names = [e["username"] for e in client.get("/api/leaderboard/").json()["data"]]
        assert "dave" not in names

    def test_streak_category(self, client, ranked):
        data = client.get("/api/leaderboard/", params={"category": "streak"}).json()["data"]
        assert [e["username"] for e in data] == ["carol", "alice", "bob"]

    def test_time_category(self, client, ranked):
        data = client.get("/api/leaderboard/", params={"category": "time"}).json()["data"]
        assert data[0]["username"] == "carol"
        assert data[0]["stats"]["totalTimeSpent"] == 300

    def test_unknown_category(self, client, ranked):
        assert client.get("/api/leaderboard/", params={"category": "accuracy"}).status_code == 400

    def test_second_page_keeps_absolute_ranks(self, client, ranked):
        data = client.get("/api/leaderboard/", params={"page": 2, "limit": 2}).json()["data"]
        assert [(e["rank"], e["username"]) for e in data] == [(3, "alice")]

    def test_marks_current_user(self, client, ranked, auth_headers):
        data = client.get("/api/leaderboard/", headers=auth_headers(ranked["alice"])).json()["data"]
        assert [e["isCurrentUser"] for e in data] == [False, False, True]

    def test_entries_list_unlocked_achievements(self, client, ranked):
        carol = next(e for e in client.get("/api/leaderboard/").json()["data"] if e["username"] == "carol")
        assert carol["achievements"] == ["First Problem", "Week Warrior"]


class TestRank:
    def test_ties_share_a_rank(self, client, ranked, auth_headers):
        alice = client.get("/api/leaderboard/rank", headers=auth_headers(ranked["alice"])).json()["data"]
        carol = client.get("/api/leaderboard/rank", headers=auth_headers(ranked["carol"])).json()["data"]
        assert alice == {"category": "problems", "rank": 2, "total": 3}
        assert carol["rank"] == 2

    def test_rank_by_streak(self, client, ranked, auth_headers):
        resp = client.get("/api/leaderboard/rank", params={"category": "streak"}, headers=auth_headers(ranked["bob"]))
        assert resp.json()["data"]["rank"] == 3

    def test_requires_authentication(self, client):
        assert client.get("/api/leaderboard/rank").status_code == 401


class TestAchievements:
    def test_anonymous_catalog_is_locked(self, client):
        data = client.get("/api/leaderboard/achievements").json()["data"]
        assert len(data) == 6
        assert not any(a["unlocked"] for a in data)

    def test_unlocked_for_caller(self, client, make_user, set_stats, auth_headers):
        user = set_stats(make_user("eve"), total_solved=10, streak=7)
        data = client.get("/api/leaderboard/achievements", headers=auth_headers(user)).json()["data"]
        unlocked = [a["name"] for a in data if a["unlocked"]]
        assert unlocked == ["First Problem", "Getting Started", "Week Warrior"]


class TestLeaderboardStats:
    def test_headline_numbers(self, client, ranked):
        data = client.get("/api/leaderboard/stats").json()["data"]
        assert data["totalUsers"] == 3
        assert data["activeUsers"] == 1
        assert data["topPerformer"] == {"username": "bob", "problemsSolved": 10}
        assert data["longestStreak"] == {"username": "carol", "streak": 9}

    def test_empty_platform(self, client):
        data = client.get("/api/leaderboard/stats").json()["data"]
        assert data["topPerformer"] == {"username": None, "problemsSolved": 0}


class TestCommunity:
    def test_top_members(self, client, ranked):
        data = client.get("/api/community/members/top", params={"limit": 2}).json()["data"]
        assert [m["username"] for m in data] == ["bob", "carol"]
        assert data[0]["stats"] == {"totalSolved": 10, "streak": 1}

    def test_online_members(self, client, ranked, set_stats):
        set_stats(ranked["bob"], last_active_date=datetime.now() - timedelta(hours=2))
        data = client.get("/api/community/members/online").json()["data"]
        assert [m["username"] for m in data] == ["alice"]
        assert data[0]["isOnline"] is True

    def test_community_stats(self, client, ranked, set_stats):
        set_stats(ranked["bob"], last_active_date=datetime.now() - timedelta(hours=3))
        data = client.get("/api/community/stats").json()["data"]
        assert data == {"totalMembers": 3, "activeToday": 2, "onlineNow": 1}

    def test_progress_makes_member_online(self, client, student, make_topic, make_problem, auth_headers):
        problem = make_problem(make_topic())
        client.put(f"/api/progress/problem/{problem.id}", json={"status": "attempted"}, headers=auth_headers(student))

        data = client.get("/api/community/members/online").json()["data"]
        assert [m["username"] for m in data] == ["alice"]
