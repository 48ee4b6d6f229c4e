"""
Notification repository.

Mutations always filter on the recipient so a user can never read or
dismiss someone else's notification.
"""

from typing import Iterable, List, Mapping, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.base import new_id, utc_now_iso
from galerie.models.notification import Notification


NOTIFICATION_TYPES = (
    "request_new",
    "request_assigned",
    "request_comment",
    "request_precisions",
    "request_delivered",
    "request_refused",
)

LIST_LIMIT = 100


class NotificationRepository:
    """
    Repository for in-app notifications.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        recipient_login: str,
        type: str,
        title: str,
        message: str,
        link: Optional[str] = None,
    ) -> str:
        """
        Create an unread notification.

        Raises:
            ValueError: If type is not one of NOTIFICATION_TYPES
        """
        if type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type '{type}'")

        notification = Notification(
            id=new_id(),
            recipient_login=recipient_login,
            type=type,
            title=title,
            message=message,
            link=link or None,
            is_read=0,
            dismissed=0,
            created_at=utc_now_iso(),
        )
        self.session.add(notification)
        await self.session.flush()
        return notification.id

    async def create_batch(self, notifications: Iterable[Mapping]) -> List[str]:
        """Create one notification per mapping of ``create`` keyword arguments."""
        return [await self.create(**item) for item in notifications]

    async def list_for(self, recipient_login: str) -> List[Notification]:
        result = await self.session.execute(
            select(Notification)
            .where(
                Notification.recipient_login == recipient_login,
                Notification.dismissed == 0,
            )
            .order_by(Notification.created_at.desc())
            .limit(LIST_LIMIT)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def unread_count(self, recipient_login: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.recipient_login == recipient_login,
                Notification.is_read == 0,
                Notification.dismissed == 0,
            )
        )
        return result.scalar_one()

    async def mark_read(self, notification_id: str, recipient_login: str) -> bool:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.recipient_login == recipient_login,
            )
            .values(is_read=1)
        )
        return result.rowcount > 0

    async def mark_all_read(self, recipient_login: str) -> int:
        """Returns the number of notifications marked read."""
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.recipient_login == recipient_login,
                Notification.is_read == 0,
                Notification.dismissed == 0,
            )
            .values(is_read=1)
        )
        return result.rowcount

    async def dismiss(self, notification_id: str, recipient_login: str) -> bool:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.recipient_login == recipient_login,
            )
            .values(dismissed=1)
        )
        return result.rowcount > 0

    async def dismiss_all(self, recipient_login: str) -> int:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.recipient_login == recipient_login,
                Notification.dismissed == 0,
            )
            .values(dismissed=1)
        )
        return result.rowcount
