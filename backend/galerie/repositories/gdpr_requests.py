"""
GDPR data-subject request repository.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from galerie.core.exceptions import InvalidTransitionError
from galerie.models.base import new_id, utc_now_iso
from galerie.models.gdpr import GdprRequest, GdprRequestHistory
from galerie.models.user import User


RIGHT_TYPES = ("acces", "rectification", "effacement", "portabilite", "opposition")
GDPR_STATUSES = ("nouveau", "en_cours", "traite")

VALID_TRANSITIONS: Dict[str, tuple] = {
    "nouveau": ("en_cours", "traite"),
    "en_cours": ("nouveau", "traite"),
    "traite": (),
}


@dataclass
class GdprRequestPage:
    requests: List[Dict[str, Any]]
    total: int


class GdprRequestRepository:
    """
    Repository for GDPR requests and their history.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_request(
        self,
        requester_login: str,
        right_type: str,
        message: str,
        consent_contact: bool = False,
    ) -> str:
        """
        File a request in status ``nouveau`` and record its creation.

        Args:
            requester_login: User exercising the right
            right_type: One of RIGHT_TYPES
            message: Free-text request
            consent_contact: Whether the user agreed to be contacted

        Returns:
            The new request id

        Raises:
            ValueError: If right_type is unknown
        """
        if right_type not in RIGHT_TYPES:
            raise ValueError(f"Unknown right type '{right_type}'")

        now = utc_now_iso()
        request = GdprRequest(
            id=new_id(),
            requester_login=requester_login,
            right_type=right_type,
            message=message,
            status="nouveau",
            consent_contact=1 if consent_contact else 0,
            created_at=now,
            updated_at=now,
        )
        self.session.add(request)
        await self.session.flush()

        await self._add_history(
            request.id,
            actor_login=requester_login,
            action="created",
            to_status="nouveau",
        )
        return request.id

    async def list_requests(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
    ) -> GdprRequestPage:
        """
        One page of requests, newest first, with requester profile fields.

        ``total`` counts every request matching the status filter.
        """
        condition = GdprRequest.status == status if status else None

        stmt = (
            select(GdprRequest, User.github_name, User.github_email, User.github_avatar_url)
            .outerjoin(User, GdprRequest.requester_login == User.github_login)
            .order_by(GdprRequest.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        if condition is not None:
            stmt = stmt.where(condition)

        result = await self.session.execute(stmt)
        requests = [
            {
                **request.to_dict(),
                "requester_name": name,
                "requester_email": email,
                "requester_avatar": avatar,
            }
            for request, name, email, avatar in result.all()
        ]
        return GdprRequestPage(requests=requests, total=await self.count(status))

    async def update_status(
        self,
        request_id: str,
        new_status: str,
        actor_login: str,
        response_message: Optional[str] = None,
    ) -> bool:
        """
        Move a request to a new status and record the change.

        The response message is kept as history detail only when the
        request is closed (``traite``).

        Returns:
            True on success, False if the request does not exist

        Raises:
            InvalidTransitionError: If the workflow forbids the move
        """
        request = await self.session.get(GdprRequest, request_id, populate_existing=True)
        if request is None:
            return False

        current = request.status
        if new_status not in VALID_TRANSITIONS.get(current, ()):
            raise InvalidTransitionError(current, new_status)

        request.status = new_status
        request.updated_at = utc_now_iso()
        await self.session.flush()

        await self._add_history(
            request_id,
            actor_login=actor_login,
            action="status_changed",
            from_status=current,
            to_status=new_status,
            detail=response_message if new_status == "traite" and response_message else None,
        )
        return True

    async def count(self, status: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(GdprRequest)
        if status:
            stmt = stmt.where(GdprRequest.status == status)
        return (await self.session.execute(stmt)).scalar_one()

    async def _add_history(
        self,
        request_id: str,
        actor_login: str,
        action: str,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.session.add(
            GdprRequestHistory(
                id=new_id(),
                request_id=request_id,
                actor_login=actor_login,
                action=action,
                from_status=from_status,
                to_status=to_status,
                detail=detail,
                created_at=utc_now_iso(),
            )
        )
        await self.session.flush()

    async def get_history(self, request_id: str) -> List[Dict[str, Any]]:
        detail_user = aliased(User)
        stmt = (
            select(
                GdprRequestHistory,
                User.github_name,
                User.github_avatar_url,
                detail_user.github_name,
                detail_user.github_avatar_url,
            )
            .outerjoin(User, GdprRequestHistory.actor_login == User.github_login)
            .outerjoin(detail_user, GdprRequestHistory.detail == detail_user.github_login)
            .where(GdprRequestHistory.request_id == request_id)
            .order_by(GdprRequestHistory.created_at)
        )
        result = await self.session.execute(stmt)
        return [
            {
                **entry.to_dict(),
                "actor_name": actor_name,
                "actor_avatar": actor_avatar,
                "detail_name": detail_name,
                "detail_avatar": detail_avatar,
            }
            for entry, actor_name, actor_avatar, detail_name, detail_avatar in result.all()
        ]
