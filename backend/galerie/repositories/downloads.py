"""
Download counters.

Signed-in downloads increment a per-pictogram counter. Anonymous visitors
get a daily quota tracked under a hash of their IP and the current date, so
raw addresses are never stored.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional
import hashlib

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from galerie.models.pictogram import AnonymousDownload, Download


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def hash_ip(ip: str, day: str) -> str:
    """
    Hash an IP address with the day it was seen.

    Args:
        ip: Client IP address
        day: Date as YYYY-MM-DD

    Returns:
        SHA-256 hex digest of ``ip + day``
    """
    return hashlib.sha256(f"{ip}{day}".encode("utf-8")).hexdigest()


class DownloadRepository:
    """
    Repository for download counters.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def increment(self, pictogram_id: str) -> int:
        stmt = insert(Download).values(pictogram_id=pictogram_id, count=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Download.pictogram_id],
            set_={"count": Download.count + 1},
        ).returning(Download.count)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def get_count(self, pictogram_id: str) -> int:
        result = await self.session.execute(
            select(Download.count).where(Download.pictogram_id == pictogram_id)
        )
        return result.scalar_one_or_none() or 0

    async def get_all(self) -> Dict[str, int]:
        result = await self.session.execute(select(Download.pictogram_id, Download.count))
        return {pictogram_id: count for pictogram_id, count in result.all()}

    async def get_anonymous_count(self, ip: str, day: Optional[str] = None) -> int:
        day = day or today_utc()
        result = await self.session.execute(
            select(AnonymousDownload.count).where(
                AnonymousDownload.ip == hash_ip(ip, day),
                AnonymousDownload.download_date == day,
            )
        )
        return result.scalar_one_or_none() or 0

    async def increment_anonymous(self, ip: str, day: Optional[str] = None) -> int:
        """
        Count one anonymous download for today.

        Returns:
            Number of downloads for this visitor today, including this one
        """
        day = day or today_utc()
        stmt = insert(AnonymousDownload).values(ip=hash_ip(ip, day), download_date=day, count=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AnonymousDownload.ip, AnonymousDownload.download_date],
            set_={"count": AnonymousDownload.count + 1},
        ).returning(AnonymousDownload.count)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def cleanup_anonymous(self, days: int = 7, today: Optional[date] = None) -> int:
        """
        Delete anonymous counters older than ``days`` days.

        Returns:
            Number of rows deleted
        """
        today = today or datetime.now(timezone.utc).date()
        cutoff = (today - timedelta(days=days)).isoformat()
        result = await self.session.execute(
            delete(AnonymousDownload).where(AnonymousDownload.download_date < cutoff)
        )
        return result.rowcount
