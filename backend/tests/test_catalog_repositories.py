"""
Unit tests for PictogramRepository and GalleryRepository.

Uses the ``seeded_session`` fixture: pictograms "velo" (in gallery
"transports") and "train".
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.repositories.galleries import GalleryRepository
from galerie.repositories.pictograms import PictogramRepository
from galerie.schemas.catalog import Contributor


class TestPictogramRepository:
    @pytest.mark.asyncio
    async def test_list_pictograms_with_gallery_ids(self, seeded_session: AsyncSession):
        # Act
        pictograms = await PictogramRepository(seeded_session).list_pictograms()

        # Assert
        by_id = {p.id: p for p in pictograms}
        assert set(by_id) == {"velo", "train"}
        assert by_id["velo"].gallery_ids == ["transports"]
        assert by_id["velo"].tags == ["transport", "mobilité"]
        assert by_id["train"].gallery_ids is None
        assert by_id["train"].tags is None

    @pytest.mark.asyncio
    async def test_json_shape_is_camel_case(self, seeded_session: AsyncSession):
        # Act
        pictogram = await PictogramRepository(seeded_session).get_pictogram("velo")
        data = pictogram.to_json_dict()

        # Assert
        assert data["lastModified"] == "2026-01-01T00:00:00Z"
        assert data["galleryIds"] == ["transports"]
        assert "contributor" not in data

    @pytest.mark.asyncio
    async def test_get_missing_pictogram(self, seeded_session: AsyncSession):
        assert await PictogramRepository(seeded_session).get_pictogram("nope") is None

    @pytest.mark.asyncio
    async def test_insert_duplicate_id_raises(self, seeded_session: AsyncSession):
        with pytest.raises(IntegrityError):
            await PictogramRepository(seeded_session).insert_pictogram(
                id="velo",
                name="Vélo bis",
                filename="velo-bis.svg",
                url="https://cdn.example.org/velo-bis.svg",
                size=1,
                last_modified="2026-01-03T00:00:00Z",
            )

    @pytest.mark.asyncio
    async def test_update_name_tags_and_contributor(self, seeded_session: AsyncSession):
        # Arrange
        repo = PictogramRepository(seeded_session)

        # Act
        updated = await repo.update_pictogram(
            "train",
            name="Train régional",
            tags=["rail"],
            contributor=Contributor(github_username="octocat", github_avatar_url="https://a/o"),
        )

        # Assert
        assert updated.name == "Train régional"
        assert updated.tags == ["rail"]
        assert updated.contributor.github_username == "octocat"
        assert updated.to_json_dict()["contributor"] == {
            "githubUsername": "octocat",
            "githubAvatarUrl": "https://a/o",
        }

    @pytest.mark.asyncio
    async def test_update_can_clear_contributor(self, seeded_session: AsyncSession):
        # Arrange
        repo = PictogramRepository(seeded_session)
        await repo.update_pictogram("train", contributor=Contributor(github_username="octocat"))

        # Act
        kept = await repo.update_pictogram("train", name="Train")
        cleared = await repo.update_pictogram("train", contributor=None)

        # Assert
        assert kept.contributor is not None
        assert cleared.contributor is None

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, seeded_session: AsyncSession):
        assert await PictogramRepository(seeded_session).update_pictogram("nope", name="x") is None

    @pytest.mark.asyncio
    async def test_delete_cascades_gallery_links(self, seeded_session: AsyncSession):
        # Act
        deleted = await PictogramRepository(seeded_session).delete_pictogram("velo")

        # Assert
        assert deleted is True
        gallery = await GalleryRepository(seeded_session).get_gallery("transports")
        assert gallery.pictogram_ids == []

    @pytest.mark.asyncio
    async def test_find_by_filename(self, seeded_session: AsyncSession):
        repo = PictogramRepository(seeded_session)

        assert (await repo.find_by_filename("train.svg")).id == "train"
        assert await repo.find_by_filename("missing.svg") is None


class TestGalleryRepository:
    @pytest.mark.asyncio
    async def test_list_galleries(self, seeded_session: AsyncSession):
        # Act
        galleries = await GalleryRepository(seeded_session).list_galleries()

        # Assert
        assert len(galleries) == 1
        assert galleries[0].id == "transports"
        assert galleries[0].pictogram_ids == ["velo"]
        assert galleries[0].to_json_dict()["pictogramIds"] == ["velo"]

    @pytest.mark.asyncio
    async def test_add_pictograms_is_idempotent_and_bumps_updated_at(self, seeded_session: AsyncSession):
        # Arrange
        repo = GalleryRepository(seeded_session)
        before = (await repo.get_gallery("transports")).updated_at

        # Act
        await repo.add_pictograms("transports", ["train", "velo"])

        # Assert
        gallery = await repo.get_gallery("transports")
        assert sorted(gallery.pictogram_ids) == ["train", "velo"]
        assert gallery.updated_at >= before

    @pytest.mark.asyncio
    async def test_remove_pictogram(self, seeded_session: AsyncSession):
        # Arrange
        repo = GalleryRepository(seeded_session)

        # Act
        removed = await repo.remove_pictogram("transports", "velo")
        removed_again = await repo.remove_pictogram("transports", "velo")

        # Assert
        assert removed is True
        assert removed_again is False
        assert (await repo.get_gallery("transports")).pictogram_ids == []

    @pytest.mark.asyncio
    async def test_update_and_delete_gallery(self, seeded_session: AsyncSession):
        # Arrange
        repo = GalleryRepository(seeded_session)

        # Act
        updated = await repo.update_gallery("transports", name="Mobilité", description="Tout ce qui roule")

        # Assert
        assert updated.name == "Mobilité"
        assert updated.description == "Tout ce qui roule"
        assert updated.color == "#000091"
        assert await repo.delete_gallery("transports") is True
        assert await repo.get_gallery("transports") is None
        assert await repo.update_gallery("transports", name="x") is None

    @pytest.mark.asyncio
    async def test_create_duplicate_gallery_raises(self, seeded_session: AsyncSession):
        with pytest.raises(IntegrityError):
            await GalleryRepository(seeded_session).create_gallery("transports", "Again")
