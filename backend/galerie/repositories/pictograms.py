"""
Pictogram repository.

Provides the catalogue queries behind the manifest and the admin CRUD on
pictogram metadata.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.pictogram import GalleryPictogram, Pictogram
from galerie.schemas.catalog import Contributor, PictogramOut


_UNSET = object()


def to_pictogram_out(row: Pictogram, gallery_ids: Optional[List[str]] = None) -> PictogramOut:
    contributor = None
    if row.contributor_username:
        contributor = Contributor(
            github_username=row.contributor_username,
            github_avatar_url=row.contributor_avatar_url or "",
        )
    return PictogramOut(
        id=row.id,
        name=row.name,
        filename=row.filename,
        url=row.url,
        size=row.size,
        last_modified=row.last_modified,
        tags=row.get_tags(),
        gallery_ids=gallery_ids or None,
        contributor=contributor,
    )


class PictogramRepository:
    """
    Repository for pictogram data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _gallery_map(self) -> Dict[str, List[str]]:
        result = await self.session.execute(select(GalleryPictogram))
        galleries: Dict[str, List[str]] = defaultdict(list)
        for link in result.scalars():
            galleries[link.pictogram_id].append(link.gallery_id)
        return galleries

    async def list_pictograms(self) -> List[PictogramOut]:
        """
        All pictograms with the ids of the galleries they belong to.

        Gallery links are fetched in one query and joined in memory.
        """
        result = await self.session.execute(select(Pictogram).order_by(Pictogram.name))
        galleries = await self._gallery_map()
        return [to_pictogram_out(row, galleries.get(row.id)) for row in result.scalars()]

    async def get_pictogram(self, pictogram_id: str) -> Optional[PictogramOut]:
        row = await self.session.get(Pictogram, pictogram_id, populate_existing=True)
        if row is None:
            return None
        result = await self.session.execute(
            select(GalleryPictogram.gallery_id).where(GalleryPictogram.pictogram_id == pictogram_id)
        )
        return to_pictogram_out(row, list(result.scalars()))

    async def find_by_filename(self, filename: str) -> Optional[Pictogram]:
        result = await self.session.execute(
            select(Pictogram).where(Pictogram.filename == filename)
        )
        return result.scalars().first()

    async def insert_pictogram(
        self,
        id: str,
        name: str,
        filename: str,
        url: str,
        size: int,
        last_modified: str,
        tags: Optional[List[str]] = None,
        gallery_ids: Optional[List[str]] = None,
        contributor: Optional[Contributor] = None,
    ) -> PictogramOut:
        """
        Insert a pictogram and link it to galleries.

        Raises:
            IntegrityError: If the id already exists or a gallery is unknown
        """
        pictogram = Pictogram(
            id=id,
            name=name,
            filename=filename,
            url=url,
            size=size,
            last_modified=last_modified,
            contributor_username=contributor.github_username if contributor else None,
            contributor_avatar_url=contributor.github_avatar_url if contributor else None,
        )
        pictogram.set_tags(tags)
        self.session.add(pictogram)
        await self.session.flush()

        for gallery_id in gallery_ids or []:
            await self.session.execute(
                insert(GalleryPictogram)
                .values(gallery_id=gallery_id, pictogram_id=id)
                .on_conflict_do_nothing()
            )

        return to_pictogram_out(pictogram, list(gallery_ids or []))

    async def update_pictogram(
        self,
        pictogram_id: str,
        name: Optional[str] = None,
        tags: Optional[List[str]] = None,
        contributor: object = _UNSET,
    ) -> Optional[PictogramOut]:
        """
        Update name, tags or contributor.

        Passing ``contributor=None`` clears the contributor; leaving it out
        keeps the current one.

        Returns:
            The updated pictogram, or None if it does not exist
        """
        pictogram = await self.session.get(Pictogram, pictogram_id)
        if pictogram is None:
            return None

        if name is not None:
            pictogram.name = name
        if tags is not None:
            pictogram.set_tags(tags)
        if contributor is not _UNSET:
            pictogram.contributor_username = contributor.github_username if contributor else None
            pictogram.contributor_avatar_url = contributor.github_avatar_url if contributor else None

        await self.session.flush()
        return await self.get_pictogram(pictogram_id)

    async def delete_pictogram(self, pictogram_id: str) -> bool:
        result = await self.session.execute(
            delete(Pictogram).where(Pictogram.id == pictogram_id)
        )
        return result.rowcount > 0
