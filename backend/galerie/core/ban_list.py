"""
In-memory ban list.

Loaded from the database at startup and updated on ban/unban so that a
ban takes effect on the very next authenticated request.
"""

import logging
from typing import Iterable, Set

from galerie.repositories.users import UserRepository

logger = logging.getLogger(__name__)


class BanList:
    """Set of banned GitHub logins."""

    def __init__(self, logins: Iterable[str] = ()):
        self._logins: Set[str] = set(logins)

    async def load(self, repository: UserRepository) -> int:
        """
        Replace the current contents with the banned users from the database.

        Returns:
            Number of banned logins loaded
        """
        self._logins = set(await repository.get_banned_logins())
        logger.info("Ban list loaded", extra={"banned_count": len(self._logins)})
        return len(self._logins)

    async def ban(self, repository: UserRepository, login: str) -> bool:
        """
        Ban a user in the database and in memory.

        Returns:
            False if the user does not exist
        """
        if not await repository.ban_user(login):
            return False
        self.add(login)
        logger.info("User banned", extra={"login": login})
        return True

    async def unban(self, repository: UserRepository, login: str) -> bool:
        if not await repository.unban_user(login):
            return False
        self.remove(login)
        logger.info("User unbanned", extra={"login": login})
        return True

    def is_banned(self, login: str) -> bool:
        return login in self._logins

    def add(self, login: str) -> None:
        self._logins.add(login)

    def remove(self, login: str) -> None:
        self._logins.discard(login)

    def __len__(self) -> int:
        return len(self._logins)
