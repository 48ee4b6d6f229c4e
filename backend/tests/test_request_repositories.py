"""
Unit tests for the pictogram request and GDPR request workflows.

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.core.exceptions import InvalidTransitionError
from galerie.repositories.gdpr_requests import GdprRequestRepository
from galerie.repositories.picto_requests import PictoRequestRepository, can_transition


class TestPictoRequestTransitions:
    @pytest.mark.parametrize(
        "current,requested,allowed",
        [
            ("nouvelle", "en_cours", True),
            ("nouvelle", "refusee", True),
            ("nouvelle", "livree", False),
            ("en_cours", "precisions_requises", True),
            ("precisions_requises", "en_cours", True),
            ("precisions_requises", "livree", False),
            ("livree", "en_cours", False),
            ("refusee", "nouvelle", False),
        ],
    )
    def test_can_transition(self, current, requested, allowed):
        assert can_transition(current, requested) is allowed


class TestPictoRequestRepository:
    @pytest.fixture
    def repo(self, seeded_session: AsyncSession) -> PictoRequestRepository:
        return PictoRequestRepository(seeded_session)

    @pytest.mark.asyncio
    async def test_create_writes_history(self, repo):
        # Act
        request_id = await repo.create_request("octocat", "Tramway", "Un tramway vu de face")

        # Assert
        request = await repo.get_request(request_id)
        assert request["status"] == "nouvelle"
        assert request["urgency"] == "normale"
        assert request["requester_name"] == "The Octocat"
        assert request["assigned_to_name"] is None
        assert request["comment_count"] == 0

        history = await repo.get_history(request_id)
        assert [(h["action"], h["to_status"]) for h in history] == [("created", "nouvelle")]

    @pytest.mark.asyncio
    async def test_unknown_urgency_rejected(self, repo):
        with pytest.raises(ValueError):
            await repo.create_request("octocat", "Tramway", "desc", urgency="critique")

    @pytest.mark.asyncio
    async def test_missing_request(self, repo):
        assert await repo.get_request("missing") is None
        assert await repo.update_status("missing", "en_cours") is False
        assert await repo.assign_request("missing", "hubot") is False

    @pytest.mark.asyncio
    async def test_assign_forces_en_cours(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Tramway", "desc")

        # Act
        assigned = await repo.assign_request(request_id, "hubot")

        # Assert
        assert assigned is True
        request = await repo.get_request(request_id)
        assert request["status"] == "en_cours"
        assert request["assigned_to"] == "hubot"
        assert request["assigned_to_name"] == "Hubot"

    @pytest.mark.asyncio
    async def test_assign_refused_outside_open_statuses(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Tramway", "desc")
        await repo.update_status(request_id, "refusee", rejection_reason="Doublon")

        # Act / Assert
        assert await repo.assign_request(request_id, "hubot") is False

    @pytest.mark.asyncio
    async def test_invalid_transition_raises(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Tramway", "desc")

        # Act / Assert
        with pytest.raises(InvalidTransitionError) as exc_info:
            await repo.update_status(request_id, "livree")

        assert exc_info.value.current == "nouvelle"
        assert exc_info.value.requested == "livree"

    @pytest.mark.asyncio
    async def test_refusal_requires_reason(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Tramway", "desc")

        # Act / Assert
        with pytest.raises(ValueError, match="Rejection reason is required"):
            await repo.update_status(request_id, "refusee")

    @pytest.mark.asyncio
    async def test_delivery_exposes_pictogram_url(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Vélo", "desc")
        await repo.assign_request(request_id, "hubot")

        # Act
        updated = await repo.update_status(request_id, "livree", delivered_pictogram_id="velo")

        # Assert
        assert updated is True
        mine = await repo.list_by_user("octocat")
        assert mine[0]["status"] == "livree"
        assert mine[0]["delivered_pictogram_url"] == "https://cdn.example.org/velo.svg"
        assert await repo.list_by_user("hubot") == []

    @pytest.mark.asyncio
    async def test_active_count_and_status_filter(self, repo):
        # Arrange
        first = await repo.create_request("octocat", "A", "desc")
        await repo.create_request("octocat", "B", "desc")
        await repo.update_status(first, "refusee", rejection_reason="Hors charte")

        # Act
        active = await repo.active_count()
        refused = await repo.list_requests(status="refusee")

        # Assert
        assert active == 1
        assert [r["title"] for r in refused] == ["A"]
        assert refused[0]["rejection_reason"] == "Hors charte"
        assert len(await repo.list_requests()) == 2

    @pytest.mark.asyncio
    async def test_comments(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Tramway", "desc")

        # Act
        await repo.add_comment(request_id, "hubot", "Quel angle de vue ?")

        # Assert
        comments = await repo.list_comments(request_id)
        assert comments[0]["content"] == "Quel angle de vue ?"
        assert comments[0]["author_name"] == "Hubot"
        assert (await repo.get_request(request_id))["comment_count"] == 1

    @pytest.mark.asyncio
    async def test_history_resolves_assignee_detail(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "Tramway", "desc")

        # Act
        await repo.add_history_entry(request_id, "octocat", "assigned", detail="hubot")

        # Assert
        history = await repo.get_history(request_id)
        assert history[-1]["detail_name"] == "Hubot"

    @pytest.mark.asyncio
    async def test_unknown_history_action_rejected(self, repo):
        request_id = await repo.create_request("octocat", "Tramway", "desc")

        with pytest.raises(ValueError):
            await repo.add_history_entry(request_id, "octocat", "deleted")


class TestGdprRequestRepository:
    @pytest.fixture
    def repo(self, seeded_session: AsyncSession) -> GdprRequestRepository:
        return GdprRequestRepository(seeded_session)

    @pytest.mark.asyncio
    async def test_create_and_list(self, repo):
        # Arrange
        await repo.create_request("octocat", "acces", "Quelles données avez-vous ?", consent_contact=True)
        await repo.create_request("hubot", "effacement", "Supprimez mon compte")

        # Act
        page = await repo.list_requests(page=1, limit=1)

        # Assert
        assert page.total == 2
        assert len(page.requests) == 1
        assert page.requests[0]["status"] == "nouveau"

    @pytest.mark.asyncio
    async def test_unknown_right_rejected(self, repo):
        with pytest.raises(ValueError):
            await repo.create_request("octocat", "oubli", "message")

    @pytest.mark.asyncio
    async def test_close_records_response_in_history(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "acces", "message")
        await repo.update_status(request_id, "en_cours", actor_login="hubot", response_message="ignored")

        # Act
        closed = await repo.update_status(request_id, "traite", actor_login="hubot", response_message="Export envoyé")

        # Assert
        assert closed is True
        history = await repo.get_history(request_id)
        assert [h["to_status"] for h in history] == ["nouveau", "en_cours", "traite"]
        assert history[1]["detail"] is None
        assert history[2]["detail"] == "Export envoyé"
        assert history[2]["actor_name"] == "Hubot"
        assert await repo.count(status="traite") == 1

    @pytest.mark.asyncio
    async def test_closed_request_is_terminal(self, repo):
        # Arrange
        request_id = await repo.create_request("octocat", "acces", "message")
        await repo.update_status(request_id, "traite", actor_login="hubot")

        # Act / Assert
        with pytest.raises(InvalidTransitionError):
            await repo.update_status(request_id, "en_cours", actor_login="hubot")

    @pytest.mark.asyncio
    async def test_missing_request(self, repo):
        assert await repo.update_status("missing", "traite", actor_login="hubot") is False
