"""
Feedback issues already seen by each user.
"""

from typing import Iterable, Set

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.base import utc_now_iso
from galerie.models.user import FeedbackSeen


class FeedbackSeenRepository:
    """
    Repository for the feedback issues a user has seen.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_seen_issue_ids(self, user_login: str) -> Set[int]:
        result = await self.session.execute(
            select(FeedbackSeen.issue_id).where(FeedbackSeen.user_login == user_login)
        )
        return set(result.scalars().all())

    async def mark_seen(self, user_login: str, issue_id: int) -> None:
        """Mark one issue as seen; marking it again keeps the first timestamp."""
        await self.mark_many_seen(user_login, [issue_id])

    async def mark_many_seen(self, user_login: str, issue_ids: Iterable[int]) -> None:
        """
        Mark several issues as seen in one statement.

        Raises:
            IntegrityError: If the user does not exist
        """
        now = utc_now_iso()
        rows = [
            {"user_login": user_login, "issue_id": issue_id, "seen_at": now}
            for issue_id in dict.fromkeys(issue_ids)
        ]
        if not rows:
            return

        await self.session.execute(
            insert(FeedbackSeen).values(rows).on_conflict_do_nothing()
        )
