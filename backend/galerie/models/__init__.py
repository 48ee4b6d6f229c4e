"""
SQLAlchemy ORM models for the pictogram gallery.

Import models from this module to ensure they're registered with SQLAlchemy.
The schema itself is owned by the SQL migrations.
"""

from galerie.models.base import Base, ModelMixin, TagsMixin, TimestampMixin, new_id, utc_now_iso
from galerie.models.pictogram import (
    AnonymousDownload,
    Download,
    Gallery,
    GalleryPictogram,
    Pictogram,
)
from galerie.models.user import FeedbackSeen, Favorite, LikesCount, PictogramLike, User
from galerie.models.collection import UserCollection, UserCollectionPictogram
from galerie.models.user_pictogram import UserCollectionUserPictogram, UserPictogram
from galerie.models.request import PictoRequest, PictoRequestComment, PictoRequestHistory
from galerie.models.gdpr import GdprRequest, GdprRequestHistory
from galerie.models.notification import Notification

__all__ = [
    # Base classes
    "Base",
    "ModelMixin",
    "TagsMixin",
    "TimestampMixin",
    "new_id",
    "utc_now_iso",
    # Models
    "AnonymousDownload",
    "Download",
    "Favorite",
    "FeedbackSeen",
    "Gallery",
    "GalleryPictogram",
    "GdprRequest",
    "GdprRequestHistory",
    "LikesCount",
    "Notification",
    "Pictogram",
    "PictogramLike",
    "PictoRequest",
    "PictoRequestComment",
    "PictoRequestHistory",
    "User",
    "UserCollection",
    "UserCollectionPictogram",
    "UserCollectionUserPictogram",
    "UserPictogram",
]
