"""
Pictogram request repository.

Handles the request workflow (status transitions, assignment), the
comment thread and the audit history of each request.

Status workflow::

    nouvelle ──> en_cours ──> livree
       │            │  ^
       │            v  │
       │   precisions_requises
       v
    refusee  <── en_cours

``livree`` and ``refusee`` are terminal.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from galerie.core.exceptions import InvalidTransitionError
from galerie.models.base import new_id, utc_now_iso
from galerie.models.pictogram import Pictogram
from galerie.models.request import PictoRequest, PictoRequestComment, PictoRequestHistory
from galerie.models.user import User


REQUEST_STATUSES = ("nouvelle", "en_cours", "precisions_requises", "livree", "refusee")
ACTIVE_STATUSES = ("nouvelle", "en_cours", "precisions_requises")
URGENCIES = ("normale", "urgente")

VALID_TRANSITIONS: Dict[str, tuple] = {
    "nouvelle": ("en_cours", "refusee"),
    "en_cours": ("precisions_requises", "livree", "refusee"),
    "precisions_requises": ("en_cours",),
    "livree": (),
    "refusee": (),
}

HISTORY_ACTIONS = ("created", "assigned", "status_changed")

_UNSET = object()


def can_transition(current: str, requested: str) -> bool:
    return requested in VALID_TRANSITIONS.get(current, ())


class PictoRequestRepository:
    """
    Repository for pictogram requests, their comments and history.

    Workflow violations raise InvalidTransitionError; unknown ids return
    None or False.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_request(
        self,
        requester_login: str,
        title: str,
        description: str,
        reference_image_key: Optional[str] = None,
        urgency: str = "normale",
    ) -> str:
        """
        Create a request in status ``nouvelle``.

        A "created" history entry is written alongside.

        Args:
            requester_login: GitHub login of the author
            title: Short title
            description: What pictogram is needed
            reference_image_key: Object key of an uploaded reference image
            urgency: "normale" or "urgente"

        Returns:
            The new request id

        Raises:
            ValueError: If urgency is not recognised

        Example:
            >>> request_id = await repo.create_request(
            ...     requester_login="octocat",
            ...     title="Bicycle",
            ...     description="A bicycle seen from the side",
            ... )
        """
        if urgency not in URGENCIES:
            raise ValueError(f"Unknown urgency '{urgency}'")

        now = utc_now_iso()
        request = PictoRequest(
            id=new_id(),
            requester_login=requester_login,
            title=title,
            description=description,
            reference_image_key=reference_image_key or None,
            urgency=urgency,
            status="nouvelle",
            created_at=now,
            updated_at=now,
        )
        self.session.add(request)
        await self.session.flush()

        await self.add_history_entry(
            request.id,
            actor_login=requester_login,
            action="created",
            to_status="nouvelle",
        )
        return request.id

    async def get_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a request with requester and assignee profiles and the number
        of comments.

        Returns:
            Dict of request fields, or None if not found
        """
        assignee = aliased(User)
        comment_count = (
            select(func.count())
            .where(PictoRequestComment.request_id == PictoRequest.id)
            .correlate(PictoRequest)
            .scalar_subquery()
        )
        stmt = (
            select(
                PictoRequest,
                User.github_name.label("requester_name"),
                User.github_avatar_url.label("requester_avatar"),
                assignee.github_name.label("assigned_to_name"),
                assignee.github_avatar_url.label("assigned_to_avatar"),
                comment_count.label("comment_count"),
            )
            .outerjoin(User, PictoRequest.requester_login == User.github_login)
            .outerjoin(assignee, PictoRequest.assigned_to == assignee.github_login)
            .where(PictoRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None

        request, requester_name, requester_avatar, assigned_name, assigned_avatar, count = row
        return {
            **request.to_dict(),
            "requester_name": requester_name,
            "requester_avatar": requester_avatar,
            "assigned_to_name": assigned_name,
            "assigned_to_avatar": assigned_avatar,
            "comment_count": count,
        }

    async def list_by_user(self, requester_login: str) -> List[Dict[str, Any]]:
        """A user's own requests, newest first, with the delivered pictogram URL."""
        stmt = (
            select(PictoRequest, Pictogram.url.label("delivered_pictogram_url"))
            .outerjoin(Pictogram, PictoRequest.delivered_pictogram_id == Pictogram.id)
            .where(PictoRequest.requester_login == requester_login)
            .order_by(PictoRequest.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [
            {**request.to_dict(), "delivered_pictogram_url": url}
            for request, url in result.all()
        ]

    async def list_requests(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """All requests, newest first, optionally filtered by status."""
        assignee = aliased(User)
        stmt = (
            select(
                PictoRequest,
                User.github_name,
                User.github_avatar_url,
                assignee.github_name,
                assignee.github_avatar_url,
            )
            .outerjoin(User, PictoRequest.requester_login == User.github_login)
            .outerjoin(assignee, PictoRequest.assigned_to == assignee.github_login)
            .order_by(PictoRequest.created_at.desc())
        )
        if status:
            stmt = stmt.where(PictoRequest.status == status)

        result = await self.session.execute(stmt)
        return [
            {
                **request.to_dict(),
                "requester_name": requester_name,
                "requester_avatar": requester_avatar,
                "assigned_to_name": assigned_name,
                "assigned_to_avatar": assigned_avatar,
            }
            for request, requester_name, requester_avatar, assigned_name, assigned_avatar in result.all()
        ]

    async def update_status(
        self,
        request_id: str,
        new_status: str,
        rejection_reason: Optional[str] = None,
        delivered_pictogram_id: Optional[str] = None,
        assigned_to: object = _UNSET,
    ) -> bool:
        """
        Move a request to a new status.

        Args:
            request_id: Request to update
            new_status: Target status
            rejection_reason: Required when moving to ``refusee``
            delivered_pictogram_id: Pictogram delivered (for ``livree``)
            assigned_to: New assignee; None clears it, omitted keeps it

        Returns:
            True on success, False if the request does not exist

        Raises:
            InvalidTransitionError: If the workflow forbids the move
            ValueError: If ``refusee`` is requested without a reason
        """
        request = await self.session.get(PictoRequest, request_id, populate_existing=True)
        if request is None:
            return False

        if not can_transition(request.status, new_status):
            raise InvalidTransitionError(request.status, new_status)

        if new_status == "refusee" and not rejection_reason:
            raise ValueError("Rejection reason is required")

        request.status = new_status
        request.updated_at = utc_now_iso()
        if assigned_to is not _UNSET:
            request.assigned_to = assigned_to
        if rejection_reason:
            request.rejection_reason = rejection_reason
        if delivered_pictogram_id:
            request.delivered_pictogram_id = delivered_pictogram_id

        await self.session.flush()
        return True

    async def assign_request(self, request_id: str, contributor_login: str) -> bool:
        """
        Assign a contributor and force the status to ``en_cours``.

        Only requests in ``nouvelle`` or ``en_cours`` can be assigned.

        Returns:
            True if assigned, False if missing or in another status
        """
        result = await self.session.execute(
            update(PictoRequest)
            .where(
                PictoRequest.id == request_id,
                PictoRequest.status.in_(("nouvelle", "en_cours")),
            )
            .values(
                assigned_to=contributor_login,
                status="en_cours",
                updated_at=utc_now_iso(),
            )
        )
        return result.rowcount > 0

    async def active_count(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(PictoRequest)
            .where(PictoRequest.status.in_(ACTIVE_STATUSES))
        )
        return result.scalar_one()

    async def add_comment(self, request_id: str, author_login: str, content: str) -> str:
        comment = PictoRequestComment(
            id=new_id(),
            request_id=request_id,
            author_login=author_login,
            content=content,
            created_at=utc_now_iso(),
        )
        self.session.add(comment)
        await self.session.flush()
        return comment.id

    async def list_comments(self, request_id: str) -> List[Dict[str, Any]]:
        stmt = (
            select(PictoRequestComment, User.github_name, User.github_avatar_url)
            .outerjoin(User, PictoRequestComment.author_login == User.github_login)
            .where(PictoRequestComment.request_id == request_id)
            .order_by(PictoRequestComment.created_at)
        )
        result = await self.session.execute(stmt)
        return [
            {**comment.to_dict(), "author_name": name, "author_avatar": avatar}
            for comment, name, avatar in result.all()
        ]

    async def add_history_entry(
        self,
        request_id: str,
        actor_login: str,
        action: str,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> str:
        """
        Append an audit entry.

        ``detail`` holds the rejection reason for refusals and the assignee
        login for assignments.
        """
        if action not in HISTORY_ACTIONS:
            raise ValueError(f"Unknown history action '{action}'")

        entry = PictoRequestHistory(
            id=new_id(),
            request_id=request_id,
            actor_login=actor_login,
            action=action,
            from_status=from_status,
            to_status=to_status,
            detail=detail,
            created_at=utc_now_iso(),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry.id

    async def get_history(self, request_id: str) -> List[Dict[str, Any]]:
        """
        History of a request, oldest first.

        When ``detail`` is a login (assignments), the matching user's name
        and avatar are included as ``detail_name`` and ``detail_avatar``.
        """
        detail_user = aliased(User)
        stmt = (
            select(
                PictoRequestHistory,
                User.github_avatar_url,
                detail_user.github_name,
                detail_user.github_avatar_url,
            )
            .outerjoin(User, PictoRequestHistory.actor_login == User.github_login)
            .outerjoin(detail_user, PictoRequestHistory.detail == detail_user.github_login)
            .where(PictoRequestHistory.request_id == request_id)
            .order_by(PictoRequestHistory.created_at)
        )
        result = await self.session.execute(stmt)
        return [
            {
                **entry.to_dict(),
                "actor_avatar": actor_avatar,
                "detail_name": detail_name,
                "detail_avatar": detail_avatar,
            }
            for entry, actor_avatar, detail_name, detail_avatar in result.all()
        ]
