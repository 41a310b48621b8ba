from abc import ABC, abstractmethod
from threading import RLock

from cachetools import TTLCache
from loguru import logger

from src.auth_api.core.models import UserDetails


class UserCache(ABC):
    """Cache of user details keyed by username (email)."""

    @abstractmethod
    def get_user_from_cache(self, username: str) -> UserDetails | None:
        """
        Get cached user details.

        Args:
            username: The user's email

        Returns:
            Cached details, or None when absent or expired
        """
        raise NotImplementedError

    @abstractmethod
    def put_user_in_cache(self, user: UserDetails) -> None:
        """Store user details under ``user.username``."""
        raise NotImplementedError

    @abstractmethod
    def remove_user_from_cache(self, username: str) -> None:
        """Drop the entry for ``username``. Removing a missing entry is a no-op."""
        raise NotImplementedError


class UserCacheInMemory(UserCache):
    def __init__(self, maxsize: int = 1024, ttl: float = 300) -> None:
        self._cache: TTLCache[str, UserDetails] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = RLock()

    def get_user_from_cache(self, username: str) -> UserDetails | None:
        with self._lock:
            return self._cache.get(username)

    def put_user_in_cache(self, user: UserDetails) -> None:
        with self._lock:
            self._cache[user.username] = user

    def remove_user_from_cache(self, username: str) -> None:
        with self._lock:
            removed = self._cache.pop(username, None)
        if removed is not None:
            logger.debug("Evicted cached user details for {}", username)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
