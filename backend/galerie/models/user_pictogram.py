"""
Pictograms uploaded by users into their private space.

The image itself lives in object storage under ``minio_key``; the row only
keeps its metadata and size for quota accounting.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Index

from galerie.models.base import Base, ModelMixin, TagsMixin, TimestampMixin, utc_now_iso


class UserPictogram(Base, TimestampMixin, TagsMixin, ModelMixin):
    """
    A pictogram uploaded by a user.

    Attributes:
        id: UUID primary key
        owner_login: Owner GitHub login
        name: Display name
        filename: Original file name
        minio_key: Object storage key of the file
        size: File size in bytes
        tags: JSON array of tags
    """

    __tablename__ = "user_pictograms"

    id = Column(String, primary_key=True)
    owner_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    name = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    minio_key = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    tags = Column(Text, nullable=True)

    __table_args__ = (
        Index("up_owner_login_idx", "owner_login"),
    )


class UserCollectionUserPictogram(Base, ModelMixin):
    __tablename__ = "user_collection_user_pictograms"

    collection_id = Column(
        String,
        ForeignKey("user_collections.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_pictogram_id = Column(
        String,
        ForeignKey("user_pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position = Column(Integer, nullable=False, default=0)
    added_at = Column(String, nullable=True, default=utc_now_iso)

    __table_args__ = (
        Index("ucup_user_pictogram_id_idx", "user_pictogram_id"),
    )
