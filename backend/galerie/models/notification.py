"""
In-app notification model.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Index

from galerie.models.base import Base, ModelMixin, utc_now_iso


class Notification(Base, ModelMixin):
    """
    Notification addressed to one user.

    Attributes:
        type: request_new, request_assigned, request_comment,
            request_precisions, request_delivered, request_refused
        is_read: 1 once read
        dismissed: 1 once dismissed (hidden from lists)
    """

    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    recipient_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String, nullable=True)
    is_read = Column(Integer, nullable=False, default=0)
    dismissed = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=True, default=utc_now_iso)

    __table_args__ = (
        Index("notif_recipient_read_idx", "recipient_login", "is_read"),
        Index("notif_recipient_dismissed_idx", "recipient_login", "dismissed"),
    )
