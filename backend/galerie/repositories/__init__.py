"""
Repository layer: one class per aggregate, each bound to an AsyncSession.

Repositories flush but never commit; the caller owns the transaction.
"""

from galerie.repositories.collections import CollectionRepository
from galerie.repositories.downloads import DownloadRepository
from galerie.repositories.feedback_seen import FeedbackSeenRepository
from galerie.repositories.galleries import GalleryRepository
from galerie.repositories.gdpr_requests import GdprRequestRepository
from galerie.repositories.notifications import NotificationRepository
from galerie.repositories.picto_requests import PictoRequestRepository
from galerie.repositories.pictograms import PictogramRepository
from galerie.repositories.reactions import FavoriteRepository, LikeRepository
from galerie.repositories.user_pictograms import UserPictogramRepository
from galerie.repositories.users import UserRepository

__all__ = [
    "CollectionRepository",
    "DownloadRepository",
    "FavoriteRepository",
    "FeedbackSeenRepository",
    "GalleryRepository",
    "GdprRequestRepository",
    "LikeRepository",
    "NotificationRepository",
    "PictoRequestRepository",
    "PictogramRepository",
    "UserPictogramRepository",
    "UserRepository",
]
