"""
Personal collections repository.

Every query is scoped to the owner login: a collection id belonging to
another user behaves as if it did not exist.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.base import new_id, utc_now_iso
from galerie.models.collection import UserCollection, UserCollectionPictogram


MAX_COLLECTIONS = 20
MAX_PICTOGRAMS_PER_COLLECTION = 200

ADD_OK = "ok"
ADD_NOT_FOUND = "not_found"
ADD_ALREADY_IN = "already_in"
ADD_LIMIT_REACHED = "limit_reached"

_UNSET = object()


@dataclass
class CollectionData:
    id: str
    user_login: str
    name: str
    description: Optional[str]
    color: Optional[str]
    position: int
    created_at: Optional[str]
    updated_at: Optional[str]
    pictogram_ids: List[str] = field(default_factory=list)


def _to_data(row: UserCollection, pictogram_ids: List[str]) -> CollectionData:
    return CollectionData(
        id=row.id,
        user_login=row.user_login,
        name=row.name,
        description=row.description,
        color=row.color,
        position=row.position,
        created_at=row.created_at,
        updated_at=row.updated_at,
        pictogram_ids=pictogram_ids,
    )


class CollectionRepository:
    """
    Repository for user collections.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _owned(self, collection_id: str, user_login: str) -> Optional[UserCollection]:
        result = await self.session.execute(
            select(UserCollection)
            .where(
                UserCollection.id == collection_id,
                UserCollection.user_login == user_login,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _pictogram_ids(self, collection_id: str) -> List[str]:
        result = await self.session.execute(
            select(UserCollectionPictogram.pictogram_id)
            .where(UserCollectionPictogram.collection_id == collection_id)
            .order_by(UserCollectionPictogram.position)
        )
        return list(result.scalars().all())

    async def list_collections(self, user_login: str) -> List[CollectionData]:
        result = await self.session.execute(
            select(UserCollection)
            .where(UserCollection.user_login == user_login)
            .order_by(UserCollection.position)
        )
        return [
            _to_data(row, await self._pictogram_ids(row.id))
            for row in result.scalars().all()
        ]

    async def get_collection(self, collection_id: str, user_login: str) -> Optional[CollectionData]:
        row = await self._owned(collection_id, user_login)
        if row is None:
            return None
        return _to_data(row, await self._pictogram_ids(collection_id))

    async def create_collection(
        self,
        user_login: str,
        name: str,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[CollectionData]:
        """
        Create a collection after the user's existing ones.

        Returns:
            The new collection, or None when the user already has
            MAX_COLLECTIONS collections
        """
        stats = await self.session.execute(
            select(func.count(), func.coalesce(func.max(UserCollection.position), -1))
            .where(UserCollection.user_login == user_login)
        )
        count, max_position = stats.one()
        if count >= MAX_COLLECTIONS:
            return None

        now = utc_now_iso()
        collection = UserCollection(
            id=new_id(),
            user_login=user_login,
            name=name,
            description=description,
            color=color,
            position=max_position + 1,
            created_at=now,
            updated_at=now,
        )
        self.session.add(collection)
        await self.session.flush()
        return _to_data(collection, [])

    async def update_collection(
        self,
        collection_id: str,
        user_login: str,
        name: Optional[str] = None,
        color: object = _UNSET,
        description: object = _UNSET,
    ) -> Optional[CollectionData]:
        """
        Update a collection. ``color`` and ``description`` accept None to
        clear them; leaving them out keeps the current value.
        """
        values = {"updated_at": utc_now_iso()}
        if name is not None:
            values["name"] = name
        if color is not _UNSET:
            values["color"] = color
        if description is not _UNSET:
            values["description"] = description

        await self.session.execute(
            update(UserCollection)
            .where(
                UserCollection.id == collection_id,
                UserCollection.user_login == user_login,
            )
            .values(**values)
        )
        return await self.get_collection(collection_id, user_login)

    async def delete_collection(self, collection_id: str, user_login: str) -> bool:
        result = await self.session.execute(
            delete(UserCollection).where(
                UserCollection.id == collection_id,
                UserCollection.user_login == user_login,
            )
        )
        return result.rowcount > 0

    async def reorder_collections(self, user_login: str, collection_ids: Sequence[str]) -> None:
        """Set each collection's position to its index in ``collection_ids``."""
        now = utc_now_iso()
        for position, collection_id in enumerate(collection_ids):
            await self.session.execute(
                update(UserCollection)
                .where(
                    UserCollection.id == collection_id,
                    UserCollection.user_login == user_login,
                )
                .values(position=position, updated_at=now)
            )

    async def add_pictogram(self, collection_id: str, user_login: str, pictogram_id: str) -> str:
        """
        Append a pictogram to a collection.

        Returns:
            One of ADD_OK, ADD_NOT_FOUND, ADD_ALREADY_IN, ADD_LIMIT_REACHED
        """
        if await self._owned(collection_id, user_login) is None:
            return ADD_NOT_FOUND

        existing = await self.session.execute(
            select(UserCollectionPictogram).where(
                UserCollectionPictogram.collection_id == collection_id,
                UserCollectionPictogram.pictogram_id == pictogram_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            return ADD_ALREADY_IN

        stats = await self.session.execute(
            select(func.count(), func.coalesce(func.max(UserCollectionPictogram.position), -1))
            .where(UserCollectionPictogram.collection_id == collection_id)
        )
        count, max_position = stats.one()
        if count >= MAX_PICTOGRAMS_PER_COLLECTION:
            return ADD_LIMIT_REACHED

        self.session.add(
            UserCollectionPictogram(
                collection_id=collection_id,
                pictogram_id=pictogram_id,
                position=max_position + 1,
                added_at=utc_now_iso(),
            )
        )
        await self.session.flush()
        return ADD_OK

    async def remove_pictogram(self, collection_id: str, user_login: str, pictogram_id: str) -> bool:
        if await self._owned(collection_id, user_login) is None:
            return False

        result = await self.session.execute(
            delete(UserCollectionPictogram).where(
                UserCollectionPictogram.collection_id == collection_id,
                UserCollectionPictogram.pictogram_id == pictogram_id,
            )
        )
        return result.rowcount > 0

    async def reorder_pictograms(
        self,
        collection_id: str,
        user_login: str,
        pictogram_ids: Sequence[str],
    ) -> bool:
        if await self._owned(collection_id, user_login) is None:
            return False

        for position, pictogram_id in enumerate(pictogram_ids):
            await self.session.execute(
                update(UserCollectionPictogram)
                .where(
                    UserCollectionPictogram.collection_id == collection_id,
                    UserCollectionPictogram.pictogram_id == pictogram_id,
                )
                .values(position=position)
            )
        return True
