"""
Personal collections: ordered lists of pictograms owned by a user.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Index

from galerie.models.base import Base, ModelMixin, TimestampMixin, utc_now_iso


class UserCollection(Base, TimestampMixin, ModelMixin):
    """
    A user's collection.

    Attributes:
        id: UUID primary key
        user_login: Owner GitHub login
        name: Collection name
        description: Optional description
        color: Optional display color
        position: Sort order among the owner's collections
    """

    __tablename__ = "user_collections"

    id = Column(String, primary_key=True)
    user_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("uc_user_login_idx", "user_login"),
    )


class UserCollectionPictogram(Base, ModelMixin):
    __tablename__ = "user_collection_pictograms"

    collection_id = Column(
        String,
        ForeignKey("user_collections.id", ondelete="CASCADE"),
        primary_key=True,
    )
    pictogram_id = Column(
        String,
        ForeignKey("pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position = Column(Integer, nullable=False, default=0)
    added_at = Column(String, nullable=True, default=utc_now_iso)

    __table_args__ = (
        Index("ucp_pictogram_id_idx", "pictogram_id"),
    )
