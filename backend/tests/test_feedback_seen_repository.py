"""
Unit tests for FeedbackSeenRepository.

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.user import FeedbackSeen
from galerie.repositories.feedback_seen import FeedbackSeenRepository


@pytest.fixture
def repo(seeded_session: AsyncSession) -> FeedbackSeenRepository:
    return FeedbackSeenRepository(seeded_session)


class TestFeedbackSeen:
    @pytest.mark.asyncio
    async def test_nothing_seen_by_default(self, repo):
        assert await repo.get_seen_issue_ids("octocat") == set()

    @pytest.mark.asyncio
    async def test_mark_seen_is_per_user(self, repo):
        # Act
        await repo.mark_seen("octocat", 42)
        await repo.mark_seen("hubot", 7)

        # Assert
        assert await repo.get_seen_issue_ids("octocat") == {42}
        assert await repo.get_seen_issue_ids("hubot") == {7}

    @pytest.mark.asyncio
    async def test_marking_twice_keeps_first_timestamp(self, repo, seeded_session):
        # Arrange
        await repo.mark_seen("octocat", 42)
        first = await seeded_session.scalar(select(FeedbackSeen.seen_at))

        # Act
        await repo.mark_seen("octocat", 42)

        # Assert
        rows = (await seeded_session.execute(select(FeedbackSeen))).scalars().all()
        assert len(rows) == 1
        assert rows[0].seen_at == first
        assert rows[0].dismissed == 0

    @pytest.mark.asyncio
    async def test_mark_many_skips_already_seen(self, repo):
        # Arrange
        await repo.mark_seen("octocat", 1)

        # Act
        await repo.mark_many_seen("octocat", [1, 2, 3, 3])

        # Assert
        assert await repo.get_seen_issue_ids("octocat") == {1, 2, 3}

    @pytest.mark.asyncio
    async def test_mark_many_with_no_ids_is_noop(self, repo):
        await repo.mark_many_seen("octocat", [])

        assert await repo.get_seen_issue_ids("octocat") == set()

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected(self, repo):
        with pytest.raises(IntegrityError):
            await repo.mark_seen("ghost", 1)
