from threading import RLock
from typing import Dict, Hashable, Optional

import maya


class TTLCache:
    """
    Thread-safe mapping whose entries expire after a time-to-live.

    Used by registry clients to hold registrations and released keys for the
    lifetime of a session.  Expired entries are dropped lazily, when they are
    read, or all at once by `purge_expired`.
    """

    class TTLEntry:
        def __init__(self, value: object, ttl: int):
            self.value = value
            self.expiration = maya.now().add(seconds=ttl)

        def is_expired(self) -> bool:
            return self.expiration < maya.now()

    def __init__(self, ttl: int):
        if ttl <= 0:
            raise ValueError(f"Invalid time-to-live {ttl}")
        self.ttl = ttl
        self.__cache: Dict[Hashable, TTLCache.TTLEntry] = {}
        self.__cache_lock = RLock()

    def __setitem__(self, key, value):
        if key is None or value is None:
            raise ValueError(f"Invalid key-value pair ({key}, {value})")
        with self.__cache_lock:
            self.__cache[key] = self.TTLEntry(value=value, ttl=self.ttl)

    def __getitem__(self, key) -> Optional[object]:
        """Returns the cached value, or None if it is missing or expired."""
        return self.get(key)

    def __contains__(self, key) -> bool:
        return self.get(key) is not None

    def get(self, key, default=None):
        with self.__cache_lock:
            entry = self.__cache.get(key)
            if entry is None:
                return default
            if entry.is_expired():
                del self.__cache[key]
                return default
            return entry.value

    def setdefault(self, key, value):
        """
        Stores `value` only if there is no live entry for `key`, and returns
        whichever value ends up cached.  First write wins.
        """
        with self.__cache_lock:
            existing = self.get(key)
            if existing is not None:
                return existing
            self[key] = value
            return value

    def purge_expired(self) -> None:
        with self.__cache_lock:
            for key in list(self.__cache):
                if self.__cache[key].is_expired():
                    del self.__cache[key]

    def __len__(self):
        with self.__cache_lock:
            self.purge_expired()
            return len(self.__cache)

    def clear(self) -> None:
        with self.__cache_lock:
            self.__cache.clear()
