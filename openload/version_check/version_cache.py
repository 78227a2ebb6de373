from __future__ import annotations

from collections.abc import Callable
import json
import logging
import time

from openload.version_check.ports.key_value_store import (
    KeyValueStore,
    KeyValueStoreError,
)
from openload.version_check.version_info import VersionInfo, VersionInfoFormatError

logger = logging.getLogger(__name__)

CACHE_KEY = "open-load-version-info"
CACHE_TTL_SECONDS = 30 * 60


def current_time_ms() -> int:
    return int(time.time() * 1000)


class VersionCache:
    """Single ``VersionInfo`` record kept in a key-value store.

    A record is only handed back while it is younger than the TTL and was
    produced by the running version. Stale, foreign or corrupt records are
    removed from the store on read. Storage failures are logged and reported
    through return values, never raised.
    """

    def __init__(
        self,
        store: KeyValueStore,
        current_version: str,
        *,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        key: str = CACHE_KEY,
        get_current_time_ms: Callable[[], int] = current_time_ms,
    ) -> None:
        self._store = store
        self._current_version = current_version
        self._ttl_ms = ttl_seconds * 1000
        self._key = key
        self._get_current_time_ms = get_current_time_ms

    async def read(self) -> VersionInfo | None:
        try:
            raw = await self._store.get_item(self._key)
        except KeyValueStoreError:
            logger.warning("Failed to read cached version info.", exc_info=True)
            return None

        if raw is None:
            return None

        try:
            info = VersionInfo.from_dict(json.loads(raw))
        except (json.JSONDecodeError, VersionInfoFormatError):
            logger.warning("Discarding corrupt cached version info.", exc_info=True)
            await self.clear()
            return None

        if self._get_current_time_ms() - info.last_check_time > self._ttl_ms:
            logger.debug("Cached version info expired, discarding it.")
            await self.clear()
            return None

        if info.current_version != self._current_version:
            logger.debug(
                "Cached version info belongs to %s, running %s; discarding it.",
                info.current_version,
                self._current_version,
            )
            await self.clear()
            return None

        return info

    async def write(self, info: VersionInfo) -> bool:
        try:
            await self._store.set_item(self._key, json.dumps(info.to_dict()))
        except KeyValueStoreError:
            logger.warning("Failed to cache version info.", exc_info=True)
            return False
        return True

    async def clear(self) -> bool:
        try:
            await self._store.remove_item(self._key)
        except KeyValueStoreError:
            logger.warning("Failed to clear cached version info.", exc_info=True)
            return False
        return True
