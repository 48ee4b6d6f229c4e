"""
User repository: GitHub identities and bans.
"""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.base import utc_now_iso
from galerie.models.user import User


class UserRepository:
    """
    Repository for user data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert_user(
        self,
        github_login: str,
        github_name: Optional[str] = None,
        github_avatar_url: Optional[str] = None,
        github_email: Optional[str] = None,
    ) -> User:
        """
        Insert a user on first sign-in, refresh profile fields afterwards.

        ``first_seen_at`` is only set on insert; ``last_seen_at`` is bumped on
        every call.

        Returns:
            The stored User
        """
        now = utc_now_iso()
        profile = {
            "github_name": github_name or None,
            "github_avatar_url": github_avatar_url or None,
            "github_email": github_email or None,
        }
        stmt = insert(User).values(
            github_login=github_login,
            first_seen_at=now,
            last_seen_at=now,
            **profile,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.github_login],
            set_={**profile, "last_seen_at": now},
        )
        await self.session.execute(stmt)
        return await self.session.get(User, github_login, populate_existing=True)

    async def get_by_login(self, github_login: str) -> Optional[User]:
        stmt = select(User).where(User.github_login == github_login)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def ban_user(self, github_login: str) -> bool:
        """
        Mark a user as banned.

        Returns:
            True if the user exists
        """
        result = await self.session.execute(
            update(User)
            .where(User.github_login == github_login)
            .values(banned_at=utc_now_iso())
        )
        return result.rowcount > 0

    async def unban_user(self, github_login: str) -> bool:
        result = await self.session.execute(
            update(User)
            .where(User.github_login == github_login)
            .values(banned_at=None)
        )
        return result.rowcount > 0

    async def get_banned_logins(self) -> List[str]:
        result = await self.session.execute(
            select(User.github_login).where(User.banned_at.is_not(None))
        )
        return list(result.scalars().all())
