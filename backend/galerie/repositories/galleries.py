"""
Gallery repository: admin-curated galleries and their pictograms.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.base import utc_now_iso
from galerie.models.pictogram import Gallery, GalleryPictogram
from galerie.schemas.catalog import GalleryOut


def to_gallery_out(row: Gallery, pictogram_ids: List[str]) -> GalleryOut:
    now = utc_now_iso()
    return GalleryOut(
        id=row.id,
        name=row.name,
        description=row.description or None,
        color=row.color or None,
        pictogram_ids=pictogram_ids,
        created_at=row.created_at or now,
        updated_at=row.updated_at or now,
    )


class GalleryRepository:
    """
    Repository for gallery data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_galleries(self) -> List[GalleryOut]:
        rows = await self.session.execute(select(Gallery).order_by(Gallery.created_at))
        links = await self.session.execute(select(GalleryPictogram))

        pictograms: Dict[str, List[str]] = defaultdict(list)
        for link in links.scalars():
            pictograms[link.gallery_id].append(link.pictogram_id)

        return [to_gallery_out(row, pictograms.get(row.id, [])) for row in rows.scalars()]

    async def get_gallery(self, gallery_id: str) -> Optional[GalleryOut]:
        row = await self.session.get(Gallery, gallery_id, populate_existing=True)
        if row is None:
            return None
        result = await self.session.execute(
            select(GalleryPictogram.pictogram_id).where(GalleryPictogram.gallery_id == gallery_id)
        )
        return to_gallery_out(row, list(result.scalars()))

    async def create_gallery(
        self,
        id: str,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> GalleryOut:
        """
        Create an empty gallery.

        Raises:
            IntegrityError: If the id already exists
        """
        now = utc_now_iso()
        gallery = Gallery(
            id=id,
            name=name,
            description=description or None,
            color=color or None,
            created_at=now,
            updated_at=now,
        )
        self.session.add(gallery)
        await self.session.flush()
        return to_gallery_out(gallery, [])

    async def update_gallery(
        self,
        gallery_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Optional[GalleryOut]:
        gallery = await self.session.get(Gallery, gallery_id)
        if gallery is None:
            return None

        if name is not None:
            gallery.name = name
        if description is not None:
            gallery.description = description
        if color is not None:
            gallery.color = color
        gallery.updated_at = utc_now_iso()

        await self.session.flush()
        return await self.get_gallery(gallery_id)

    async def delete_gallery(self, gallery_id: str) -> bool:
        result = await self.session.execute(delete(Gallery).where(Gallery.id == gallery_id))
        return result.rowcount > 0

    async def add_pictograms(self, gallery_id: str, pictogram_ids: Iterable[str]) -> None:
        """Link pictograms to a gallery; existing links are left alone."""
        for pictogram_id in pictogram_ids:
            await self.session.execute(
                insert(GalleryPictogram)
                .values(gallery_id=gallery_id, pictogram_id=pictogram_id)
                .on_conflict_do_nothing()
            )
        await self._touch(gallery_id)

    async def remove_pictogram(self, gallery_id: str, pictogram_id: str) -> bool:
        result = await self.session.execute(
            delete(GalleryPictogram).where(
                GalleryPictogram.gallery_id == gallery_id,
                GalleryPictogram.pictogram_id == pictogram_id,
            )
        )
        await self._touch(gallery_id)
        return result.rowcount > 0

    async def _touch(self, gallery_id: str) -> None:
        await self.session.execute(
            update(Gallery).where(Gallery.id == gallery_id).values(updated_at=utc_now_iso())
        )
