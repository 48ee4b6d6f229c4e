"""
User-uploaded pictograms repository.

Uploads are private: every query is scoped to the owner login. Collection
membership reuses the owner's personal collections, with the same limit and
status codes as catalog pictograms.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.base import new_id, utc_now_iso
from galerie.models.collection import UserCollection
from galerie.models.user_pictogram import UserCollectionUserPictogram, UserPictogram
from galerie.repositories.collections import (
    ADD_ALREADY_IN,
    ADD_LIMIT_REACHED,
    ADD_NOT_FOUND,
    ADD_OK,
    MAX_PICTOGRAMS_PER_COLLECTION,
)


# 5 MB of uploads per user
USER_STORAGE_QUOTA = 5 * 1024 * 1024


@dataclass
class UserPictogramData:
    id: str
    owner_login: str
    name: str
    filename: str
    minio_key: str
    size: int
    tags: List[str]
    created_at: Optional[str]
    updated_at: Optional[str]


def _to_data(row: UserPictogram) -> UserPictogramData:
    return UserPictogramData(
        id=row.id,
        owner_login=row.owner_login,
        name=row.name,
        filename=row.filename,
        minio_key=row.minio_key,
        size=row.size,
        tags=row.get_tags() or [],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class UserPictogramRepository:
    """
    Repository for pictograms uploaded by users.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _owned(self, pictogram_id: str, owner_login: str) -> Optional[UserPictogram]:
        result = await self.session.execute(
            select(UserPictogram)
            .where(
                UserPictogram.id == pictogram_id,
                UserPictogram.owner_login == owner_login,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _collection_owned(self, collection_id: str, owner_login: str) -> bool:
        result = await self.session.execute(
            select(UserCollection.id).where(
                UserCollection.id == collection_id,
                UserCollection.user_login == owner_login,
            )
        )
        return result.scalar_one_or_none() is not None

    async def list_pictograms(self, owner_login: str) -> List[UserPictogramData]:
        result = await self.session.execute(
            select(UserPictogram)
            .where(UserPictogram.owner_login == owner_login)
            .order_by(UserPictogram.created_at)
        )
        return [_to_data(row) for row in result.scalars().all()]

    async def get_pictogram(self, pictogram_id: str, owner_login: str) -> Optional[UserPictogramData]:
        row = await self._owned(pictogram_id, owner_login)
        return _to_data(row) if row is not None else None

    async def storage_used(self, owner_login: str) -> int:
        """Total size in bytes of the owner's uploads."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(UserPictogram.size), 0))
            .where(UserPictogram.owner_login == owner_login)
        )
        return int(result.scalar_one())

    async def has_quota_for(self, owner_login: str, size: int) -> bool:
        return await self.storage_used(owner_login) + size <= USER_STORAGE_QUOTA

    async def insert_pictogram(
        self,
        owner_login: str,
        name: str,
        filename: str,
        minio_key: str,
        size: int,
        tags: Optional[Sequence[str]] = None,
        pictogram_id: Optional[str] = None,
    ) -> Optional[UserPictogramData]:
        """
        Record an uploaded pictogram.

        Returns:
            The new pictogram, or None when it would exceed USER_STORAGE_QUOTA

        Raises:
            IntegrityError: If the owner does not exist
        """
        if not await self.has_quota_for(owner_login, size):
            return None

        now = utc_now_iso()
        pictogram = UserPictogram(
            id=pictogram_id or new_id(),
            owner_login=owner_login,
            name=name,
            filename=filename,
            minio_key=minio_key,
            size=size,
            created_at=now,
            updated_at=now,
        )
        pictogram.set_tags(list(tags) if tags is not None else None)
        self.session.add(pictogram)
        await self.session.flush()
        return _to_data(pictogram)

    async def rename_pictogram(
        self,
        pictogram_id: str,
        owner_login: str,
        name: str,
    ) -> Optional[UserPictogramData]:
        await self.session.execute(
            update(UserPictogram)
            .where(
                UserPictogram.id == pictogram_id,
                UserPictogram.owner_login == owner_login,
            )
            .values(name=name, updated_at=utc_now_iso())
        )
        return await self.get_pictogram(pictogram_id, owner_login)

    async def delete_pictogram(self, pictogram_id: str, owner_login: str) -> Optional[str]:
        """
        Delete an upload and its collection memberships.

        Returns:
            The object storage key to remove, or None when nothing was deleted
        """
        row = await self._owned(pictogram_id, owner_login)
        if row is None:
            return None

        minio_key = row.minio_key
        await self.session.delete(row)
        await self.session.flush()
        return minio_key

    async def add_to_collection(self, collection_id: str, owner_login: str, pictogram_id: str) -> str:
        """
        Append an upload to one of the owner's collections.

        Returns:
            One of ADD_OK, ADD_NOT_FOUND, ADD_ALREADY_IN, ADD_LIMIT_REACHED
        """
        if not await self._collection_owned(collection_id, owner_login):
            return ADD_NOT_FOUND
        if await self._owned(pictogram_id, owner_login) is None:
            return ADD_NOT_FOUND

        existing = await self.session.execute(
            select(UserCollectionUserPictogram).where(
                UserCollectionUserPictogram.collection_id == collection_id,
                UserCollectionUserPictogram.user_pictogram_id == pictogram_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            return ADD_ALREADY_IN

        stats = await self.session.execute(
            select(func.count(), func.coalesce(func.max(UserCollectionUserPictogram.position), -1))
            .where(UserCollectionUserPictogram.collection_id == collection_id)
        )
        count, max_position = stats.one()
        if count >= MAX_PICTOGRAMS_PER_COLLECTION:
            return ADD_LIMIT_REACHED

        self.session.add(
            UserCollectionUserPictogram(
                collection_id=collection_id,
                user_pictogram_id=pictogram_id,
                position=max_position + 1,
                added_at=utc_now_iso(),
            )
        )
        await self.session.flush()
        return ADD_OK

    async def remove_from_collection(self, collection_id: str, owner_login: str, pictogram_id: str) -> bool:
        if not await self._collection_owned(collection_id, owner_login):
            return False

        result = await self.session.execute(
            delete(UserCollectionUserPictogram).where(
                UserCollectionUserPictogram.collection_id == collection_id,
                UserCollectionUserPictogram.user_pictogram_id == pictogram_id,
            )
        )
        return result.rowcount > 0

    async def collection_pictogram_ids(self, collection_id: str, owner_login: str) -> List[str]:
        """Upload ids in a collection, in position order."""
        if not await self._collection_owned(collection_id, owner_login):
            return []

        result = await self.session.execute(
            select(UserCollectionUserPictogram.user_pictogram_id)
            .where(UserCollectionUserPictogram.collection_id == collection_id)
            .order_by(UserCollectionUserPictogram.position)
        )
        return list(result.scalars().all())
