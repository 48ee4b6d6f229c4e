"""
Unit tests for NotificationRepository.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.repositories.notifications import NotificationRepository


@pytest.fixture
def repo(seeded_session: AsyncSession) -> NotificationRepository:
    return NotificationRepository(seeded_session)


class TestNotificationRepository:
    @pytest.mark.asyncio
    async def test_create_and_list(self, repo):
        # Act
        notification_id = await repo.create(
            "octocat", "request_delivered", "Pictogramme livré", "Votre vélo est prêt", link="/requests/1"
        )

        # Assert
        notifications = await repo.list_for("octocat")
        assert [n.id for n in notifications] == [notification_id]
        assert notifications[0].is_read == 0
        assert await repo.list_for("hubot") == []
        assert await repo.unread_count("octocat") == 1

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, repo):
        with pytest.raises(ValueError):
            await repo.create("octocat", "spam", "t", "m")

    @pytest.mark.asyncio
    async def test_create_batch(self, repo):
        # Act
        ids = await repo.create_batch(
            [
                {"recipient_login": "octocat", "type": "request_new", "title": "t", "message": "m"},
                {"recipient_login": "hubot", "type": "request_new", "title": "t", "message": "m"},
            ]
        )

        # Assert
        assert len(ids) == 2
        assert await repo.unread_count("octocat") == 1
        assert await repo.unread_count("hubot") == 1

    @pytest.mark.asyncio
    async def test_mark_read_is_scoped_to_recipient(self, repo):
        # Arrange
        notification_id = await repo.create("octocat", "request_comment", "t", "m")

        # Act
        by_other = await repo.mark_read(notification_id, "hubot")
        by_owner = await repo.mark_read(notification_id, "octocat")

        # Assert
        assert by_other is False
        assert by_owner is True
        assert await repo.unread_count("octocat") == 0

    @pytest.mark.asyncio
    async def test_mark_all_read(self, repo):
        # Arrange
        await repo.create("octocat", "request_comment", "t", "m")
        await repo.create("octocat", "request_assigned", "t", "m")

        # Act
        marked = await repo.mark_all_read("octocat")

        # Assert
        assert marked == 2
        assert await repo.unread_count("octocat") == 0
        assert len(await repo.list_for("octocat")) == 2

    @pytest.mark.asyncio
    async def test_dismiss_hides_notifications(self, repo):
        # Arrange
        first = await repo.create("octocat", "request_comment", "t", "m")
        await repo.create("octocat", "request_refused", "t", "m")

        # Act
        dismissed = await repo.dismiss(first, "octocat")
        not_owner = await repo.dismiss(first, "hubot")

        # Assert
        assert dismissed is True
        assert not_owner is False
        assert len(await repo.list_for("octocat")) == 1
        assert await repo.dismiss_all("octocat") == 1
        assert await repo.list_for("octocat") == []
        assert await repo.unread_count("octocat") == 0
