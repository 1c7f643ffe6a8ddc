"""
DevFlow Backend: Domain Service Tests
======================================

What:  Tests for the tag, question, answer, collection and account services
       against real SQLite storage, plus error translation with a mocked
       session.

What we test:
    ✅ Asking a question creates/reuses tags and bumps their counts
    ✅ Views and votes are counted; counters never go negative
    ✅ Answers bump the question's answer count (when the question exists)
    ✅ Bookmarks toggle on and off
    ✅ Account links are idempotent; passwords are stored hashed
    ✅ SQLAlchemy failures surface as DatabaseError
"""

import uuid

import pytest
from sqlalchemy.exc import OperationalError

from devflow.exceptions import (
    AuthenticationError,
    DatabaseError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)
from devflow.models import Account, Answer, Question, Tag
from devflow.schemas.account import AccountLink
from devflow.services.account_service import account_service, hash_password
from devflow.services.answer_service import answer_service
from devflow.services.collection_service import collection_service
from devflow.services.errors import database_errors
from devflow.services.question_service import question_service
from devflow.services.tag_service import normalize_tag_name, tag_service


async def ask(db, author=None, tags=("python",), title="How do I await a coroutine?"):
    return await question_service.ask_question(
        db, author or uuid.uuid4(), title, "Longer explanation of the problem.", list(tags)
    )


class TestTagService:

    def test_normalize_tag_name(self):
        assert normalize_tag_name("  Python ") == "python"

    @pytest.mark.asyncio
    async def test_get_or_create_reuses_existing_tag(self, db_session):
        first = await tag_service.get_or_create(db_session, "FastAPI")
        second = await tag_service.get_or_create(db_session, "fastapi ")

        assert first.id == second.id
        assert first.name == "fastapi"
        assert await Tag.count(db_session) == 1

    @pytest.mark.asyncio
    async def test_tag_created_concurrently_is_reused(self, db_session, session_factory, monkeypatch):
        """Another request stores the tag between our lookup and our insert."""
        original_find_one = Tag.find_one
        lookups = []

        async def find_one_while_other_request_inserts(session, filters):
            lookups.append(filters)
            if len(lookups) == 1:
                async with session_factory() as other_request:
                    await Tag.create(other_request, {"name": "python"})
                    await other_request.commit()
                return None
            return await original_find_one(session, filters)

        monkeypatch.setattr(Tag, "find_one", find_one_while_other_request_inserts)

        tag = await tag_service.get_or_create(db_session, "Python")

        monkeypatch.undo()
        stored = await Tag.find(db_session)
        assert [t.id for t in stored] == [tag.id]
        assert tag.name == "python"
        assert len(lookups) == 2

    @pytest.mark.asyncio
    async def test_ask_question_reuses_tag_committed_elsewhere(self, db_session, session_factory):
        async with session_factory() as other_request:
            await Tag.create(other_request, {"name": "asyncio"})
            await other_request.commit()

        question = await ask(db_session, tags=["asyncio"])

        tag = await Tag.find_one(db_session, {"name": "asyncio"})
        assert question.tags == [tag.id]
        assert tag.questions == 1

    @pytest.mark.asyncio
    async def test_list_tags_most_used_first(self, db_session):
        await ask(db_session, tags=["python", "sql"])
        await ask(db_session, tags=["python"])
        await tag_service.get_or_create(db_session, "rust")

        tags = await tag_service.list_tags(db_session)

        assert [(tag.name, tag.questions) for tag in tags] == [
            ("python", 2),
            ("sql", 1),
            ("rust", 0),
        ]


class TestQuestionService:

    @pytest.mark.asyncio
    async def test_ask_question_links_tags(self, db_session):
        author = uuid.uuid4()

        question = await ask(db_session, author=author, tags=["Python", "asyncio", "python"])

        tags = {tag.name: tag for tag in await Tag.find(db_session)}
        assert set(tags) == {"python", "asyncio"}
        assert question.tags == [tags["python"].id, tags["asyncio"].id]
        assert question.author == author
        assert all(tag.questions == 1 for tag in tags.values())

    @pytest.mark.asyncio
    async def test_get_question_counts_views(self, db_session):
        question = await ask(db_session)

        await question_service.get_question(db_session, question.id)
        viewed = await question_service.get_question(db_session, question.id)
        peeked = await question_service.get_question(db_session, question.id, count_view=False)

        assert viewed.views == 2
        assert peeked.views == 2

    @pytest.mark.asyncio
    async def test_get_missing_question(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await question_service.get_question(db_session, uuid.uuid4())
        assert exc_info.value.context["resource"] == "question"

    @pytest.mark.asyncio
    async def test_list_questions_pagination(self, db_session):
        for n in range(3):
            await ask(db_session, title=f"Question number {n}")

        first_page = await question_service.list_questions(db_session, limit=2)
        last_page = await question_service.list_questions(db_session, limit=2, skip=2)

        assert first_page.total_count == 3
        assert len(first_page.questions) == 2
        assert first_page.has_more is True
        assert len(last_page.questions) == 1
        assert last_page.has_more is False

    @pytest.mark.asyncio
    async def test_vote_and_retract(self, db_session):
        question = await ask(db_session)

        voted = await question_service.vote_question(db_session, question.id, "upvote")
        retracted = await question_service.vote_question(db_session, question.id, "upvote", -1)

        assert voted.upvotes == 1
        assert retracted.upvotes == 0

    @pytest.mark.asyncio
    async def test_votes_are_plain_counters(self, db_session):
        """No per-user record: repeats accumulate, withdrawals are not tied to the voter."""
        question = await ask(db_session)

        await question_service.vote_question(db_session, question.id, "upvote")
        await question_service.vote_question(db_session, question.id, "upvote")
        withdrawn = await question_service.vote_question(db_session, question.id, "upvote", -1)

        assert withdrawn.upvotes == 1

    @pytest.mark.asyncio
    async def test_vote_cannot_go_negative(self, db_session):
        question = await ask(db_session)

        with pytest.raises(ValidationError):
            await question_service.vote_question(db_session, question.id, "downvote", -1)

    @pytest.mark.asyncio
    async def test_vote_on_missing_question(self, db_session):
        with pytest.raises(NotFoundError):
            await question_service.vote_question(db_session, uuid.uuid4(), "upvote")


class TestAnswerService:

    @pytest.mark.asyncio
    async def test_post_answer_bumps_count(self, db_session):
        question = await ask(db_session)

        answer = await answer_service.post_answer(db_session, uuid.uuid4(), question.id, "Use await.")

        assert answer.question == question.id
        assert (await Question.find_by_id(db_session, question.id)).answers == 1

    @pytest.mark.asyncio
    async def test_answer_to_unknown_question_is_stored(self, db_session):
        missing = uuid.uuid4()

        answer = await answer_service.post_answer(db_session, uuid.uuid4(), missing, "Anyone?")

        assert await Answer.find_by_id(db_session, answer.id) is not None

    @pytest.mark.asyncio
    async def test_list_answers_only_for_question(self, db_session):
        question = await ask(db_session)
        other = await ask(db_session, title="A different question")
        await answer_service.post_answer(db_session, uuid.uuid4(), question.id, "First")
        await answer_service.post_answer(db_session, uuid.uuid4(), question.id, "Second")
        await answer_service.post_answer(db_session, uuid.uuid4(), other.id, "Elsewhere")

        result = await answer_service.list_answers(db_session, question.id)

        assert result.total_count == 2
        assert {a.answer for a in result.answers} == {"First", "Second"}

    @pytest.mark.asyncio
    async def test_vote_on_missing_answer(self, db_session):
        with pytest.raises(NotFoundError):
            await answer_service.vote_answer(db_session, uuid.uuid4(), "upvote")

    @pytest.mark.asyncio
    async def test_downvote_answer(self, db_session):
        answer = await answer_service.post_answer(db_session, uuid.uuid4(), uuid.uuid4(), "Meh")

        voted = await answer_service.vote_answer(db_session, answer.id, "downvote")

        assert voted.downvotes == 1
        assert voted.upvotes == 0


class TestCollectionService:

    @pytest.mark.asyncio
    async def test_toggle_bookmark(self, db_session):
        author = uuid.uuid4()
        question = await ask(db_session)

        saved = await collection_service.toggle_bookmark(db_session, author, question.id)
        assert saved.saved is True
        assert [c.questions for c in await collection_service.list_saved(db_session, author)] == [question.id]

        removed = await collection_service.toggle_bookmark(db_session, author, question.id)
        assert removed.saved is False
        assert await collection_service.list_saved(db_session, author) == []

    @pytest.mark.asyncio
    async def test_collections_are_per_author(self, db_session):
        question = await ask(db_session)
        ada, grace = uuid.uuid4(), uuid.uuid4()

        await collection_service.toggle_bookmark(db_session, ada, question.id)

        assert len(await collection_service.list_saved(db_session, ada)) == 1
        assert await collection_service.list_saved(db_session, grace) == []


class TestAccountService:

    @pytest.mark.asyncio
    async def test_link_is_idempotent(self, db_session):
        user_id = uuid.uuid4()
        link = AccountLink(name="Ada", provider="github", provider_account_id="1815")

        account, created = await account_service.link_account(db_session, user_id, link)
        again, created_again = await account_service.link_account(db_session, user_id, link)

        assert created is True
        assert created_again is False
        assert again.id == account.id
        assert await Account.count(db_session) == 1

    @pytest.mark.asyncio
    async def test_credentials_password_is_hashed(self, db_session):
        link = AccountLink(
            name="Ada",
            provider="credentials",
            provider_account_id="ada@example.com",
            password="analytical-engine",
        )

        account, _ = await account_service.link_account(db_session, uuid.uuid4(), link)

        assert account.password != "analytical-engine"
        assert account.password.startswith("$2")
        assert account_service.verify_password(account, "analytical-engine") is True
        assert account_service.verify_password(account, "difference-engine") is False

    @pytest.mark.asyncio
    async def test_oauth_account_has_no_password(self, db_session):
        link = AccountLink(name="Ada", provider="github", provider_account_id="1815")

        account, _ = await account_service.link_account(db_session, uuid.uuid4(), link)

        assert account.password is None
        assert account_service.verify_password(account, "anything") is False

    @pytest.mark.asyncio
    async def test_link_owned_by_other_user_is_refused(self, db_session):
        owner, intruder = uuid.uuid4(), uuid.uuid4()
        link = AccountLink(name="Ada", provider="github", provider_account_id="gh-1")
        await account_service.link_account(db_session, owner, link)

        with pytest.raises(DuplicateKeyError) as exc_info:
            await account_service.link_account(db_session, intruder, link)

        assert exc_info.value.model == "Account"
        assert await Account.count(db_session) == 1

    @pytest.mark.asyncio
    async def test_credentials_relink_requires_password(self, db_session):
        user_id = uuid.uuid4()
        link = AccountLink(
            name="Ada",
            provider="credentials",
            provider_account_id="ada@example.com",
            password="analytical-engine",
        )
        account, _ = await account_service.link_account(db_session, user_id, link)

        with pytest.raises(AuthenticationError):
            await account_service.link_account(
                db_session, user_id, link.model_copy(update={"password": "wrong-password"})
            )

        again, created = await account_service.link_account(db_session, user_id, link)
        assert created is False
        assert again.id == account.id

    def test_overlong_password_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            hash_password("é" * 40)
        assert exc_info.value.field == "password"


class TestDatabaseErrors:

    def test_sqlalchemy_errors_become_database_error(self):
        with pytest.raises(DatabaseError) as exc_info:
            with database_errors("save the tag", tag="python"):
                raise OperationalError("INSERT INTO tags", {}, Exception("disk I/O error"))

        assert exc_info.value.message == "Could not save the tag. Please try again."
        assert exc_info.value.context == {"error_type": "OperationalError", "tag": "python"}

    def test_application_errors_pass_through(self):
        with pytest.raises(ValidationError):
            with database_errors("save the tag"):
                raise ValidationError(message="bad tag")

    @pytest.mark.asyncio
    async def test_service_wraps_driver_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        with pytest.raises(DatabaseError):
            await tag_service.list_tags(mock_db_session)
