"""
Pictogram catalogue models.

Pictograms are SVG assets stored in object storage; rows hold their
metadata. Galleries are curated, admin-managed groupings.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Index

from galerie.models.base import Base, ModelMixin, TagsMixin, TimestampMixin, utc_now_iso


class Pictogram(Base, ModelMixin, TagsMixin):
    """
    Pictogram metadata.

    Attributes:
        id: Stable identifier (derived from the filename at upload)
        name: Display name
        filename: SVG object name in storage
        url: Public URL of the SVG
        size: Byte size of the SVG
        last_modified: Storage last-modified timestamp
        tags: JSON array of tags (nullable)
        contributor_username: GitHub login of the contributor (nullable)
        contributor_avatar_url: Avatar of the contributor (nullable)
    """

    __tablename__ = "pictograms"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    url = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    last_modified = Column(String, nullable=False)
    tags = Column(Text, nullable=True)
    contributor_username = Column(String, nullable=True)
    contributor_avatar_url = Column(String, nullable=True)
    created_at = Column(String, nullable=True, default=utc_now_iso)


class Gallery(Base, TimestampMixin, ModelMixin):
    """Admin-curated gallery of pictograms."""

    __tablename__ = "galleries"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String, nullable=True)


class GalleryPictogram(Base, ModelMixin):
    """Membership of a pictogram in a gallery."""

    __tablename__ = "gallery_pictograms"

    gallery_id = Column(
        String,
        ForeignKey("galleries.id", ondelete="CASCADE"),
        primary_key=True,
    )
    pictogram_id = Column(
        String,
        ForeignKey("pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )

    __table_args__ = (
        Index("gp_pictogram_id_idx", "pictogram_id"),
    )


class Download(Base, ModelMixin):
    """Download counter per pictogram."""

    __tablename__ = "downloads"

    pictogram_id = Column(
        String,
        ForeignKey("pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    count = Column(Integer, nullable=False, default=0)


class AnonymousDownload(Base, ModelMixin):
    """
    Daily download counter for anonymous visitors.

    ``ip`` holds SHA-256(ip + date), never the address itself.
    """

    __tablename__ = "anonymous_downloads"

    ip = Column(String, primary_key=True)
    download_date = Column(String, primary_key=True)
    count = Column(Integer, nullable=False, default=1)
