from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
import logging

from openload.core.config import VersionCheckConfig
from openload.version_check.adapters.filesystem_key_value_store import (
    FileSystemKeyValueStore,
)
from openload.version_check.adapters.github_release_gateway import (
    GitHubReleaseGateway,
)
from openload.version_check.ports.release_gateway import ReleaseGateway
from openload.version_check.semver import compare_versions
from openload.version_check.version_cache import VersionCache, current_time_ms
from openload.version_check.version_info import VersionInfo, VersionStatus

logger = logging.getLogger(__name__)


def _resolve(info: VersionInfo, latest_version: str, release_url: str) -> VersionInfo:
    comparison = compare_versions(info.current_version, latest_version)
    return replace(
        info,
        latest_version=latest_version,
        release_url=release_url,
        is_latest=comparison >= 0,
        has_update=comparison < 0,
        status=(
            VersionStatus.UPDATE_AVAILABLE if comparison < 0 else VersionStatus.LATEST
        ),
    )


class VersionChecker:
    """Tells whether the running build is the latest published one.

    ``check_for_updates`` always returns a ``VersionInfo``; failures end up as
    ``VersionStatus.ERROR`` and are not cached, so the next call retries.
    Concurrent calls are not de-duplicated.
    """

    def __init__(
        self,
        current_version: str,
        gateway: ReleaseGateway,
        cache: VersionCache,
        *,
        get_current_time_ms: Callable[[], int] = current_time_ms,
    ) -> None:
        self._current_version = current_version
        self._gateway = gateway
        self._cache = cache
        self._get_current_time_ms = get_current_time_ms

    def get_current_version(self) -> str:
        return self._current_version

    async def clear_cache(self) -> None:
        await self._cache.clear()

    async def check_for_updates(self) -> VersionInfo:
        info = VersionInfo.checking(self._current_version, self._get_current_time_ms())

        try:
            if cached := await self._cache.read():
                return cached

            if resolved := await self._fetch_and_resolve(info):
                await self._cache.write(resolved)
                return resolved
        except Exception:
            logger.exception("Version check failed.")

        return replace(info, status=VersionStatus.ERROR)

    async def _fetch_and_resolve(self, info: VersionInfo) -> VersionInfo | None:
        release = await self._gateway.fetch_latest_release()
        if release and release.tag_name.strip():
            return _resolve(info, release.tag_name, release.html_url)

        tag = await self._gateway.fetch_latest_tag()
        if tag and tag.name.strip():
            return _resolve(info, tag.name, self._gateway.tag_url(tag.name))

        logger.warning("No release or tag found, version status is unknown.")
        return None


def build_version_checker(config: VersionCheckConfig) -> VersionChecker:
    gateway = GitHubReleaseGateway(
        config.owner,
        config.repository,
        token=config.github_token,
        timeout=config.request_timeout,
        base_url=config.api_base_url,
        html_base_url=config.html_base_url,
    )
    cache = VersionCache(
        FileSystemKeyValueStore(config.resolved_cache_dir),
        config.current_version,
        ttl_seconds=config.cache_ttl_seconds,
    )
    return VersionChecker(config.current_version, gateway, cache)
