"""
Tests for CatalogService.

The service opens its own sessions, so fixture data is committed to the
per-test in-memory database before it is called.
"""

import json

import pytest

from galerie.core.cache import TTLCache
from galerie.repositories.galleries import GalleryRepository
from galerie.repositories.pictograms import PictogramRepository
from galerie.services.catalog import CatalogService, content_etag


async def add_pictogram(session_maker, pictogram_id: str, gallery_ids=None) -> None:
    async with session_maker() as session:
        await PictogramRepository(session).insert_pictogram(
            id=pictogram_id,
            name=pictogram_id.title(),
            filename=f"{pictogram_id}.svg",
            url=f"https://cdn.example.org/{pictogram_id}.svg",
            size=512,
            last_modified="2026-01-01T00:00:00Z",
            gallery_ids=gallery_ids,
        )
        await session.commit()


@pytest.fixture
def catalog(session_maker) -> CatalogService:
    return CatalogService(session_maker, TTLCache(ttl_seconds=30))


class TestManifest:
    @pytest.mark.asyncio
    async def test_manifest_payload_shape(self, session_maker, catalog):
        # Arrange
        await add_pictogram(session_maker, "velo")

        # Act
        body, etag = await catalog.get_manifest()

        # Assert
        data = json.loads(body)
        assert etag == '"v0"'
        assert data["totalCount"] == 1
        assert data["pictograms"][0]["id"] == "velo"
        assert data["pictograms"][0]["lastModified"] == "2026-01-01T00:00:00Z"
        assert "galleryIds" not in data["pictograms"][0]
        assert data["lastUpdated"].endswith("Z")

    @pytest.mark.asyncio
    async def test_manifest_is_cached_until_invalidated(self, session_maker, catalog):
        # Arrange
        await add_pictogram(session_maker, "velo")
        first = await catalog.get_manifest()
        await add_pictogram(session_maker, "train")

        # Act
        cached = await catalog.get_manifest()
        catalog.invalidate_manifest()
        rebuilt_body, rebuilt_etag = await catalog.get_manifest()

        # Assert
        assert cached == first
        assert rebuilt_etag == '"v1"'
        assert json.loads(rebuilt_body)["totalCount"] == 2


class TestGalleries:
    @pytest.mark.asyncio
    async def test_galleries_etag_is_content_hash(self, session_maker, catalog):
        # Arrange
        async with session_maker() as session:
            await GalleryRepository(session).create_gallery("transports", "Transports")
            await session.commit()
        await add_pictogram(session_maker, "velo", gallery_ids=["transports"])

        # Act
        body, etag = await catalog.get_galleries()

        # Assert
        assert etag == content_etag(body)
        assert len(etag) == 34
        gallery = json.loads(body)["galleries"][0]
        assert gallery["pictogramIds"] == ["velo"]
        assert "createdAt" in gallery

    @pytest.mark.asyncio
    async def test_invalidate_galleries_also_bumps_manifest(self, catalog):
        # Arrange
        await catalog.get_manifest()
        await catalog.get_galleries()

        # Act
        catalog.invalidate_galleries()

        # Assert
        assert catalog.manifest_version == 1
        assert "manifest" not in catalog.cache
        assert "galleries" not in catalog.cache
