"""
GDPR data-subject request models.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Index

from galerie.models.base import Base, ModelMixin, TimestampMixin, utc_now_iso


class GdprRequest(Base, TimestampMixin, ModelMixin):
    """
    A data-subject request (access, rectification, erasure, portability,
    objection).

    Attributes:
        id: UUID primary key
        requester_login: User who filed the request
        right_type: acces, rectification, effacement, portabilite, opposition
        message: Free-text request
        status: nouveau, en_cours, traite
        consent_contact: 1 when the user agreed to be contacted
    """

    __tablename__ = "gdpr_requests"

    id = Column(String, primary_key=True)
    requester_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    right_type = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="nouveau")
    consent_contact = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("gdpr_status_idx", "status"),
    )


class GdprRequestHistory(Base, ModelMixin):
    __tablename__ = "gdpr_request_history"

    id = Column(String, primary_key=True)
    request_id = Column(
        String,
        ForeignKey("gdpr_requests.id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    action = Column(String, nullable=False)
    from_status = Column(String, nullable=True)
    to_status = Column(String, nullable=True)
    detail = Column(Text, nullable=True)
    created_at = Column(String, nullable=True, default=utc_now_iso)

    __table_args__ = (
        Index("gdprh_request_id_idx", "request_id"),
    )
