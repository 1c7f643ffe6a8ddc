"""
DevFlow Backend: API Integration Tests
=======================================

What:  End-to-end tests through the FastAPI app (HTTPX + ASGITransport),
       backed by a per-test SQLite database.

What we test:
    ✅ Writes require a session (401 without one)
    ✅ Question lifecycle: ask → list → read (view counted) → vote
    ✅ Answers, tags, collections and account links over HTTP
    ✅ Error bodies carry the request id; status codes per error type
    ✅ /health reports the database and compiled models
"""

import uuid

import pytest

QUESTION = {
    "title": "How do I await a coroutine?",
    "content": "Calling it returns a coroutine object instead of a result.",
    "tags": ["Python", "asyncio"],
}


async def create_question(client, headers, **overrides):
    response = await client.post("/api/questions", json={**QUESTION, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("post", "/api/questions", QUESTION),
            ("post", f"/api/questions/{uuid.uuid4()}/vote", {"vote_type": "upvote"}),
            ("post", f"/api/questions/{uuid.uuid4()}/answers", {"answer": "Use await"}),
            ("post", f"/api/answers/{uuid.uuid4()}/vote", {"vote_type": "upvote"}),
            ("post", "/api/collections/toggle", {"question_id": str(uuid.uuid4())}),
            ("get", "/api/collections", None),
            ("post", "/api/accounts", {"name": "Ada", "provider": "github", "provider_account_id": "1"}),
        ],
    )
    async def test_writes_require_session(self, test_client, method, path, body):
        kwargs = {"json": body} if body is not None else {}

        response = await getattr(test_client, method)(path, **kwargs)

        assert response.status_code == 401
        data = response.json()
        assert data["error"] == "unauthorized"
        assert data["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_expired_token_is_unauthenticated(self, test_client, user):
        from devflow.services.session_service import session_service

        token = session_service.issue_token(user, expires_in=-60)
        response = await test_client.post(
            "/api/questions", json=QUESTION, headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401


class TestQuestions:

    @pytest.mark.asyncio
    async def test_ask_question(self, test_client, auth_headers, user):
        data = await create_question(test_client, auth_headers)

        assert data["title"] == QUESTION["title"]
        assert data["author"] == str(user.id)
        assert len(data["tags"]) == 2
        assert data["views"] == 0

    @pytest.mark.asyncio
    async def test_invalid_question_rejected(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/questions", json={**QUESTION, "title": "Hm", "tags": []}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_questions(self, test_client, auth_headers):
        await create_question(test_client, auth_headers)
        await create_question(test_client, auth_headers, title="Why is my event loop closed?")

        response = await test_client.get("/api/questions", params={"limit": 1})

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        data = response.json()
        assert len(data["questions"]) == 1
        assert data["has_more"] is True

    @pytest.mark.asyncio
    async def test_reading_counts_views(self, test_client, auth_headers):
        question = await create_question(test_client, auth_headers)

        await test_client.get(f"/api/questions/{question['id']}")
        response = await test_client.get(f"/api/questions/{question['id']}")

        assert response.status_code == 200
        assert response.json()["views"] == 2

    @pytest.mark.asyncio
    async def test_missing_question_is_404(self, test_client):
        response = await test_client.get(f"/api/questions/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_id_is_422(self, test_client):
        response = await test_client.get("/api/questions/not-a-uuid")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_vote(self, test_client, auth_headers):
        question = await create_question(test_client, auth_headers)
        url = f"/api/questions/{question['id']}/vote"

        up = await test_client.post(url, json={"vote_type": "upvote"}, headers=auth_headers)
        below_zero = await test_client.post(
            url, json={"vote_type": "downvote", "change": -1}, headers=auth_headers
        )

        assert up.status_code == 200
        assert up.json()["upvotes"] == 1
        assert below_zero.status_code == 400
        assert below_zero.json()["error"] == "validation_error"


class TestAnswers:

    @pytest.mark.asyncio
    async def test_answer_thread(self, test_client, auth_headers):
        question = await create_question(test_client, auth_headers)
        url = f"/api/questions/{question['id']}/answers"

        created = await test_client.post(url, json={"answer": "Use await."}, headers=auth_headers)
        listing = await test_client.get(url)
        reread = await test_client.get(f"/api/questions/{question['id']}")

        assert created.status_code == 201
        assert created.json()["question"] == question["id"]
        assert listing.json()["total_count"] == 1
        assert reread.json()["answers"] == 1

    @pytest.mark.asyncio
    async def test_vote_answer(self, test_client, auth_headers):
        question = await create_question(test_client, auth_headers)
        answer = await test_client.post(
            f"/api/questions/{question['id']}/answers", json={"answer": "Use await."}, headers=auth_headers
        )

        response = await test_client.post(
            f"/api/answers/{answer.json()['id']}/vote", json={"vote_type": "upvote"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["upvotes"] == 1

    @pytest.mark.asyncio
    async def test_vote_on_missing_answer(self, test_client, auth_headers):
        response = await test_client.post(
            f"/api/answers/{uuid.uuid4()}/vote", json={"vote_type": "upvote"}, headers=auth_headers
        )
        assert response.status_code == 404


class TestTags:

    @pytest.mark.asyncio
    async def test_tags_are_counted(self, test_client, auth_headers):
        await create_question(test_client, auth_headers)
        await create_question(test_client, auth_headers, tags=["python"])

        response = await test_client.get("/api/tags")

        assert response.status_code == 200
        counts = {tag["name"]: tag["questions"] for tag in response.json()}
        assert counts == {"python": 2, "asyncio": 1}


class TestCollections:

    @pytest.mark.asyncio
    async def test_toggle_and_list(self, test_client, auth_headers, other_user):
        from devflow.services.session_service import session_service

        question = await create_question(test_client, auth_headers)
        body = {"question_id": question["id"]}

        saved = await test_client.post("/api/collections/toggle", json=body, headers=auth_headers)
        mine = await test_client.get("/api/collections", headers=auth_headers)
        theirs = await test_client.get(
            "/api/collections",
            headers={"Authorization": f"Bearer {session_service.issue_token(other_user)}"},
        )
        unsaved = await test_client.post("/api/collections/toggle", json=body, headers=auth_headers)

        assert saved.json() == {"question_id": question["id"], "saved": True}
        assert [item["questions"] for item in mine.json()] == [question["id"]]
        assert theirs.json() == []
        assert unsaved.json()["saved"] is False


class TestAccounts:

    @pytest.mark.asyncio
    async def test_link_then_relink(self, test_client, auth_headers, user):
        body = {
            "name": "Ada",
            "provider": "credentials",
            "provider_account_id": "ada@example.com",
            "password": "analytical-engine",
        }

        first = await test_client.post("/api/accounts", json=body, headers=auth_headers)
        second = await test_client.post("/api/accounts", json=body, headers=auth_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["id"] == second.json()["id"]
        assert first.json()["user_id"] == str(user.id)
        assert "password" not in first.json()

    @pytest.mark.asyncio
    async def test_link_owned_by_other_user_is_refused(self, test_client, auth_headers, user, other_user):
        from devflow.services.session_service import session_service

        body = {"name": "Ada", "provider": "github", "provider_account_id": "gh-1"}
        other_headers = {"Authorization": f"Bearer {session_service.issue_token(other_user)}"}

        owner = await test_client.post("/api/accounts", json=body, headers=auth_headers)
        intruder = await test_client.post("/api/accounts", json=body, headers=other_headers)

        assert owner.status_code == 201
        assert intruder.status_code == 409
        data = intruder.json()
        assert data["error"] == "duplicate_key"
        assert str(user.id) not in intruder.text
        assert "user_id" not in data

    @pytest.mark.asyncio
    async def test_credentials_relink_checks_password(self, test_client, auth_headers, other_user):
        from devflow.services.session_service import session_service

        body = {
            "name": "Ada",
            "provider": "credentials",
            "provider_account_id": "ada@example.com",
            "password": "analytical-engine",
        }
        wrong = {**body, "password": "wrong-password"}
        other_headers = {"Authorization": f"Bearer {session_service.issue_token(other_user)}"}

        await test_client.post("/api/accounts", json=body, headers=auth_headers)
        owner_wrong = await test_client.post("/api/accounts", json=wrong, headers=auth_headers)
        intruder_wrong = await test_client.post("/api/accounts", json=wrong, headers=other_headers)

        assert owner_wrong.status_code == 401
        assert intruder_wrong.status_code == 409

    @pytest.mark.asyncio
    async def test_credentials_without_password_rejected(self, test_client, auth_headers):
        body = {"name": "Ada", "provider": "credentials", "provider_account_id": "ada@example.com"}

        response = await test_client.post("/api/accounts", json=body, headers=auth_headers)

        assert response.status_code == 422


class TestHealthAndHeaders:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["models"] == ["Account", "Answer", "Collection", "Question", "Tag"]

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/")
        assert len(response.headers["X-Request-ID"]) == 8
