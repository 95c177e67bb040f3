"""Integration tests for topic and problem catalog endpoints."""

import pytest

from app.core.constants import Difficulty, UserRole
from app.models import Topic

TOPIC_BODY = {
    "title": "Binary Trees",
    "description": "Traversals, recursion and tree shaped problems",
    "order": 3,
    "difficulty": "Intermediate",
    "tags": ["trees"],
    "resources": [
        {"type": "video", "title": "Trees in 20 minutes", "url": "https://example.com/trees", "duration": 20}
    ],
}


@pytest.fixture
def moderator(make_user):
    return make_user("mod", role=UserRole.MODERATOR)


@pytest.fixture
def arrays(make_topic, make_problem):
    topic = make_topic("Arrays", order=1)
    make_problem(topic, "Two Sum", Difficulty.EASY, order=1, tags=["hash-table"], companies=["Google"])
    make_problem(topic, "3Sum", Difficulty.MEDIUM, order=2, tags=["two-pointers"], companies=["Meta"])
    make_problem(topic, "Trapping Rain Water", Difficulty.HARD, order=3, tags=["two-pointers", "stack"])
    return topic


class TestTopicReads:
    def test_list_in_curriculum_order(self, client, make_topic):
        make_topic("Strings", order=2)
        make_topic("Arrays", order=1)

        body = client.get("/api/topics/").json()
        assert [t["slug"] for t in body["data"]] == ["arrays", "strings"]
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 2, "pages": 1}

    def test_get_topic_with_problems(self, client, arrays):
        data = client.get("/api/topics/arrays").json()["data"]
        assert data["title"] == "Arrays"
        assert [p["title"] for p in data["problems"]] == ["Two Sum", "3Sum", "Trapping Rain Water"]

    def test_unknown_slug(self, client):
        resp = client.get("/api/topics/graphs")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Topic not found"

    def test_problems_carry_caller_status(self, client, arrays, student, auth_headers):
        headers = auth_headers(student)
        two_sum = client.get("/api/topics/arrays/problems").json()["data"][0]
        client.put(f"/api/progress/problem/{two_sum['id']}", json={"status": "attempted"}, headers=headers)

        mine = client.get("/api/topics/arrays/problems", headers=headers).json()["data"]
        assert [p["userStatus"] for p in mine] == ["attempted", "pending", "pending"]

        anonymous = client.get("/api/topics/arrays/problems").json()["data"]
        assert {p["userStatus"] for p in anonymous} == {"pending"}

    def test_problems_filtered_by_difficulty(self, client, arrays):
        body = client.get("/api/topics/arrays/problems", params={"difficulty": "Hard"}).json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["title"] == "Trapping Rain Water"


class TestProblemReads:
    def test_filter_by_tag_and_company(self, client, arrays):
        tagged = client.get("/api/topics/problems/all", params={"tags": "Stack,hash-table"}).json()
        assert [p["title"] for p in tagged["data"]] == ["Two Sum", "Trapping Rain Water"]

        by_company = client.get("/api/topics/problems/all", params={"company": "meta"}).json()
        assert [p["title"] for p in by_company["data"]] == ["3Sum"]

    def test_search_and_paging(self, client, arrays):
        body = client.get("/api/topics/problems/all", params={"search": "sum", "limit": 1, "page": 2}).json()
        assert body["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}
        assert body["data"][0]["title"] == "3Sum"

    def test_problem_detail_with_progress(self, client, arrays, student, auth_headers):
        headers = auth_headers(student)
        problem_id = client.get("/api/topics/arrays/problems").json()["data"][0]["id"]
        client.put(
            f"/api/progress/problem/{problem_id}",
            json={"status": "completed", "timeSpent": 12},
            headers=headers,
        )

        data = client.get(f"/api/topics/problems/{problem_id}", headers=headers).json()["data"]
        assert data["topic"]["slug"] == "arrays"
        assert data["userProgress"]["status"] == "completed"
        assert data["userProgress"]["timeSpent"] == 12

        anonymous = client.get(f"/api/topics/problems/{problem_id}").json()["data"]
        assert anonymous["userProgress"] is None

    def test_unknown_problem(self, client):
        assert client.get("/api/topics/problems/404").status_code == 404


class TestTopicWrites:
    def test_admin_creates_topic(self, client, admin, auth_headers):
        resp = client.post("/api/topics/", json=TOPIC_BODY, headers=auth_headers(admin))
        assert resp.status_code == 201

        data = resp.json()["data"]
        assert data["slug"] == "binary-trees"
        assert data["totalProblems"] == 0
        resources = client.get("/api/topics/binary-trees/resources").json()["data"]
        assert resources[0]["duration"] == 20

    def test_duplicate_title_gets_suffixed_slug(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        client.post("/api/topics/", json=TOPIC_BODY, headers=headers)
        second = client.post("/api/topics/", json=TOPIC_BODY, headers=headers).json()["data"]
        assert second["slug"] == "binary-trees-2"

    def test_rename_regenerates_slug(self, client, admin, arrays, auth_headers):
        resp = client.put(
            f"/api/topics/{arrays.id}",
            json={"title": "Arrays and Hashing"},
            headers=auth_headers(admin),
        )
        assert resp.json()["data"]["slug"] == "arrays-and-hashing"

    def test_soft_delete_hides_topic(self, client, db, admin, arrays, auth_headers):
        topic_id = arrays.id
        assert client.delete(f"/api/topics/{topic_id}", headers=auth_headers(admin)).status_code == 200
        assert client.get("/api/topics/arrays").status_code == 404

        db.expire_all()
        assert db.get(Topic, topic_id) is not None

    def test_student_cannot_create(self, client, student, auth_headers):
        resp = client.post("/api/topics/", json=TOPIC_BODY, headers=auth_headers(student))
        assert resp.status_code == 403
        assert resp.json()["success"] is False

    def test_moderator_cannot_create_topic(self, client, moderator, auth_headers):
        assert client.post("/api/topics/", json=TOPIC_BODY, headers=auth_headers(moderator)).status_code == 403

    def test_anonymous_cannot_create(self, client):
        assert client.post("/api/topics/", json=TOPIC_BODY).status_code == 401

    def test_invalid_resource_type(self, client, admin, auth_headers):
        body = {**TOPIC_BODY, "resources": [{"type": "podcast", "title": "x", "url": "https://example.com"}]}
        assert client.post("/api/topics/", json=body, headers=auth_headers(admin)).status_code == 400


class TestProblemWrites:
    def problem_body(self, topic, **overrides):
        return {
            "topicId": topic.id,
            "title": "Container With Most Water",
            "description": "Two pointers from both ends",
            "difficulty": "Medium",
            "order": 4,
            "links": {"leetcode": "https://leetcode.com/problems/container-with-most-water/"},
            **overrides,
        }

    def topic_count(self, client, slug):
        topics = client.get("/api/topics/").json()["data"]
        return next(t["totalProblems"] for t in topics if t["slug"] == slug)

    def test_moderator_creates_problem_and_count_refreshes(self, client, arrays, moderator, auth_headers):
        resp = client.post("/api/topics/problems", json=self.problem_body(arrays), headers=auth_headers(moderator))
        assert resp.status_code == 201
        assert resp.json()["data"]["links"]["leetcode"].endswith("container-with-most-water/")
        assert self.topic_count(client, "arrays") == 4

    def test_estimated_time_bounds(self, client, arrays, admin, auth_headers):
        body = self.problem_body(arrays, estimatedTime=200)
        assert client.post("/api/topics/problems", json=body, headers=auth_headers(admin)).status_code == 400

    def test_unknown_topic(self, client, admin, arrays, auth_headers):
        body = self.problem_body(arrays, topicId=999)
        assert client.post("/api/topics/problems", json=body, headers=auth_headers(admin)).status_code == 404

    def test_move_problem_refreshes_both_topics(self, client, arrays, make_topic, admin, auth_headers):
        headers = auth_headers(admin)
        strings = make_topic("Strings", order=2)
        problem_id = client.post("/api/topics/problems", json=self.problem_body(arrays), headers=headers).json()["data"]["id"]

        resp = client.put(f"/api/topics/problems/{problem_id}", json={"topicId": strings.id}, headers=headers)
        assert resp.status_code == 200
        assert self.topic_count(client, "arrays") == 3
        assert self.topic_count(client, "strings") == 1

    def test_student_cannot_create_problem(self, client, arrays, student, auth_headers):
        resp = client.post("/api/topics/problems", json=self.problem_body(arrays), headers=auth_headers(student))
        assert resp.status_code == 403

    def test_admin_soft_deletes_problem(self, client, arrays, admin, auth_headers):
        headers = auth_headers(admin)
        problem_id = client.post("/api/topics/problems", json=self.problem_body(arrays), headers=headers).json()["data"]["id"]

        assert client.delete(f"/api/topics/problems/{problem_id}", headers=headers).status_code == 200
        assert client.get(f"/api/topics/problems/{problem_id}").status_code == 404
        assert self.topic_count(client, "arrays") == 3

    def test_moderator_cannot_delete_problem(self, client, arrays, moderator, auth_headers):
        problem_id = client.get("/api/topics/arrays/problems").json()["data"][0]["id"]
        assert client.delete(f"/api/topics/problems/{problem_id}", headers=auth_headers(moderator)).status_code == 403

    def test_progress_on_deleted_problem_is_404(self, client, arrays, admin, student, auth_headers):
        problem_id = client.get("/api/topics/arrays/problems").json()["data"][0]["id"]
        client.delete(f"/api/topics/problems/{problem_id}", headers=auth_headers(admin))

        resp = client.put(
            f"/api/progress/problem/{problem_id}",
            json={"status": "completed"},
            headers=auth_headers(student),
        )
        assert resp.status_code == 404
