"""
User models: GitHub identities and their per-pictogram reactions.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Index

from galerie.models.base import Base, ModelMixin, utc_now_iso


class User(Base, ModelMixin):
    """
    GitHub user seen by the gallery.

    Attributes:
        github_login: GitHub login (primary key)
        github_name: Display name
        github_avatar_url: Avatar URL
        github_email: Public email, if any
        first_seen_at: First sign-in
        last_seen_at: Most recent sign-in
        banned_at: Set while the user is banned
    """

    __tablename__ = "users"

    github_login = Column(String, primary_key=True)
    github_name = Column(String, nullable=True)
    github_avatar_url = Column(String, nullable=True)
    github_email = Column(String, nullable=True)
    first_seen_at = Column(String, nullable=True, default=utc_now_iso)
    last_seen_at = Column(String, nullable=True, default=utc_now_iso)
    banned_at = Column(String, nullable=True)

    __table_args__ = (
        Index("users_banned_at_idx", "banned_at"),
    )

    def __repr__(self) -> str:
        return f"User(github_login={self.github_login!r})"


class Favorite(Base, ModelMixin):
    __tablename__ = "favorites"

    user_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        primary_key=True,
    )
    pictogram_id = Column(
        String,
        ForeignKey("pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(String, nullable=True, default=utc_now_iso)


class PictogramLike(Base, ModelMixin):
    __tablename__ = "pictogram_likes"

    user_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        primary_key=True,
    )
    pictogram_id = Column(
        String,
        ForeignKey("pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(String, nullable=True, default=utc_now_iso)


class LikesCount(Base, ModelMixin):
    """Denormalized like counter per pictogram."""

    __tablename__ = "likes_counts"

    pictogram_id = Column(
        String,
        ForeignKey("pictograms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    count = Column(Integer, nullable=False, default=0)


class FeedbackSeen(Base, ModelMixin):
    """Feedback issues a user has already seen or dismissed."""

    __tablename__ = "feedback_seen"

    user_login = Column(
        String,
        ForeignKey("users.github_login", ondelete="CASCADE"),
        primary_key=True,
    )
    issue_id = Column(Integer, primary_key=True, autoincrement=False)
    seen_at = Column(String, nullable=True, default=utc_now_iso)
    dismissed = Column(Integer, nullable=False, default=0)
