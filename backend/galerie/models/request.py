"""
Pictogram request workflow models.

Users ask for a new pictogram; contributors pick requests up, discuss them
in comments and deliver a pictogram or refuse the request. Every status
change is recorded in the history table.
"""

from sqlalchemy import Column, ForeignKey, String, Text, Index

from galerie.models.base import Base, ModelMixin, TimestampMixin, utc_now_iso


class PictoRequest(Base, TimestampMixin, ModelMixin):
    """
    A request for a new pictogram.

    Attributes:
        id: UUID primary key
        requester_login: Author of the request
        title: Short title
        description: What is needed
        reference_image_key: Object key of an uploaded reference image
        urgency: "normale" or "urgente"
        status: nouvelle, en_cours, precisions_requises, livree, refusee
        assigned_to: Contributor handling the request
        delivered_pictogram_id: Pictogram delivered for the request
        rejection_reason: Why the request was refused
    """

    __tablename__ = "picto_requests"

    id = Column(String, primary_key=True)
    requester_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    reference_image_key = Column(String, nullable=True)
    urgency = Column(String, nullable=False, default="normale")
    status = Column(String, nullable=False, default="nouvelle")
    assigned_to = Column(String, ForeignKey("users.github_login"), nullable=True)
    delivered_pictogram_id = Column(String, ForeignKey("pictograms.id"), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    __table_args__ = (
        Index("pr_requester_login_idx", "requester_login"),
        Index("pr_status_idx", "status"),
        Index("pr_assigned_to_idx", "assigned_to"),
    )


class PictoRequestComment(Base, ModelMixin):
    __tablename__ = "picto_request_comments"

    id = Column(String, primary_key=True)
    request_id = Column(
        String,
        ForeignKey("picto_requests.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    created_at = Column(String, nullable=True, default=utc_now_iso)

    __table_args__ = (
        Index("prc_request_id_idx", "request_id"),
    )


class PictoRequestHistory(Base, ModelMixin):
    """
    Audit entry for a request.

    ``action`` is one of "created", "assigned", "status_changed"; ``detail``
    carries the rejection reason or the assignee login.
    """

    __tablename__ = "picto_request_history"

    id = Column(String, primary_key=True)
    request_id = Column(
        String,
        ForeignKey("picto_requests.id", ondelete="CASCADE"),
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
        Index("prh_request_id_idx", "request_id"),
    )
