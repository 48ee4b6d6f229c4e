"""
Catalog service: cached manifest and galleries payloads.

Both payloads are served with an ETag so clients can revalidate with
``If-None-Match``. The rendered JSON is cached for a short TTL; any write
to pictograms or galleries must call the matching ``invalidate_*`` method.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple
import hashlib
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from galerie.core.cache import TTLCache
from galerie.repositories.galleries import GalleryRepository
from galerie.repositories.pictograms import PictogramRepository
from galerie.schemas.catalog import GalleriesFile, Manifest

logger = logging.getLogger(__name__)

MANIFEST_KEY = "manifest"
GALLERIES_KEY = "galleries"

Payload = Tuple[str, str]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def content_etag(payload: str) -> str:
    """Strong ETag from the first 32 hex chars of the payload's SHA-256."""
    return '"' + hashlib.sha256(payload.encode("utf-8")).hexdigest()[:32] + '"'


class CatalogService:
    """
    Serves the pictogram manifest and the galleries file.

    The manifest ETag is a version counter bumped on every invalidation;
    the galleries ETag is derived from the payload content.

    Attributes:
        session_factory: Factory for short-lived read sessions
        cache: TTL cache holding ``(json, etag)`` tuples
        manifest_version: Current manifest version
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: TTLCache[Payload],
    ):
        self.session_factory = session_factory
        self.cache = cache
        self.manifest_version = 0

    async def get_manifest(self) -> Payload:
        """
        Manifest of every pictogram.

        Returns:
            Tuple of (json, etag)
        """
        cached: Optional[Payload] = self.cache.get(MANIFEST_KEY)
        if cached is not None:
            return cached

        async with self.session_factory() as session:
            pictograms = await PictogramRepository(session).list_pictograms()

        manifest = Manifest(
            pictograms=pictograms,
            last_updated=_now_iso(),
            total_count=len(pictograms),
        )
        payload = (
            manifest.model_dump_json(by_alias=True, exclude_none=True),
            f'"v{self.manifest_version}"',
        )
        self.cache.set(MANIFEST_KEY, payload)
        logger.debug("Manifest rebuilt", extra={"total_count": len(pictograms)})
        return payload

    async def get_galleries(self) -> Payload:
        cached: Optional[Payload] = self.cache.get(GALLERIES_KEY)
        if cached is not None:
            return cached

        async with self.session_factory() as session:
            galleries = await GalleryRepository(session).list_galleries()

        document = GalleriesFile(galleries=galleries, last_updated=_now_iso())
        json_payload = document.model_dump_json(by_alias=True, exclude_none=True)
        payload = (json_payload, content_etag(json_payload))
        self.cache.set(GALLERIES_KEY, payload)
        return payload

    def invalidate_manifest(self) -> None:
        self.cache.delete(MANIFEST_KEY)
        self.manifest_version += 1

    def invalidate_galleries(self) -> None:
        # Gallery membership also shows up as galleryIds in the manifest
        self.cache.delete(GALLERIES_KEY)
        self.invalidate_manifest()
