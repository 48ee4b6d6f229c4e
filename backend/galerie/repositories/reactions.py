"""
Favorites and likes repositories.

Favorites are private bookmarks; likes are public and maintain a
denormalized counter per pictogram.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.user import Favorite, LikesCount, PictogramLike


class FavoriteRepository:
    """
    Repository for a user's favorite pictograms.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_favorites(self, user_login: str) -> List[str]:
        result = await self.session.execute(
            select(Favorite.pictogram_id)
            .where(Favorite.user_login == user_login)
            .order_by(Favorite.created_at)
        )
        return list(result.scalars().all())

    async def add_favorite(self, user_login: str, pictogram_id: str) -> None:
        """
        Add a favorite; adding it twice is a no-op.

        Raises:
            IntegrityError: If the user or pictogram does not exist
        """
        await self.session.execute(
            insert(Favorite)
            .values(user_login=user_login, pictogram_id=pictogram_id)
            .on_conflict_do_nothing()
        )

    async def remove_favorite(self, user_login: str, pictogram_id: str) -> bool:
        result = await self.session.execute(
            delete(Favorite).where(
                Favorite.user_login == user_login,
                Favorite.pictogram_id == pictogram_id,
            )
        )
        return result.rowcount > 0


@dataclass
class LikesData:
    """Public like counters plus the pictograms the current user liked."""

    counts: Dict[str, int] = field(default_factory=dict)
    liked: List[str] = field(default_factory=list)


@dataclass
class LikeToggle:
    liked: bool
    count: int


class LikeRepository:
    """
    Repository for pictogram likes.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_likes(self, user_login: Optional[str] = None) -> LikesData:
        """
        Like counters (only positive ones) and, for a signed-in user, the
        ids of the pictograms they liked.
        """
        counts = await self.session.execute(select(LikesCount).where(LikesCount.count > 0))
        data = LikesData(counts={row.pictogram_id: row.count for row in counts.scalars()})

        if user_login:
            liked = await self.session.execute(
                select(PictogramLike.pictogram_id).where(PictogramLike.user_login == user_login)
            )
            data.liked = list(liked.scalars().all())

        return data

    async def toggle_like(self, user_login: str, pictogram_id: str) -> LikeToggle:
        """
        Like the pictogram, or unlike it if already liked.

        The counter never goes below zero.

        Returns:
            LikeToggle with the new state and counter value
        """
        existing = await self.session.execute(
            select(PictogramLike).where(
                PictogramLike.user_login == user_login,
                PictogramLike.pictogram_id == pictogram_id,
            )
        )

        if existing.scalar_one_or_none() is not None:
            await self.session.execute(
                delete(PictogramLike).where(
                    PictogramLike.user_login == user_login,
                    PictogramLike.pictogram_id == pictogram_id,
                )
            )
            stmt = insert(LikesCount).values(pictogram_id=pictogram_id, count=0)
            stmt = stmt.on_conflict_do_update(
                index_elements=[LikesCount.pictogram_id],
                set_={"count": func.max(0, LikesCount.count - 1)},
            )
            liked = False
        else:
            await self.session.execute(
                insert(PictogramLike).values(user_login=user_login, pictogram_id=pictogram_id)
            )
            stmt = insert(LikesCount).values(pictogram_id=pictogram_id, count=1)
            stmt = stmt.on_conflict_do_update(
                index_elements=[LikesCount.pictogram_id],
                set_={"count": LikesCount.count + 1},
            )
            liked = True

        result = await self.session.execute(stmt.returning(LikesCount.count))
        return LikeToggle(liked=liked, count=result.scalar_one())
