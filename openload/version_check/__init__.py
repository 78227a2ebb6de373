from __future__ import annotations

from openload.version_check.adapters.filesystem_key_value_store import (
    FileSystemKeyValueStore,
)
from openload.version_check.adapters.github_release_gateway import (
    GitHubReleaseGateway,
)
from openload.version_check.checker import VersionChecker, build_version_checker
from openload.version_check.ports.key_value_store import (
    KeyValueStore,
    KeyValueStoreError,
)
from openload.version_check.ports.release_gateway import (
    DEFAULT_GATEWAY_MESSAGES,
    Release,
    ReleaseGateway,
    ReleaseGatewayCause,
    ReleaseGatewayError,
    Tag,
)
from openload.version_check.semver import (
    ParsedVersion,
    compare_versions,
    looks_like_semver,
    parse_semver,
)
from openload.version_check.version_cache import (
    CACHE_KEY,
    CACHE_TTL_SECONDS,
    VersionCache,
)
from openload.version_check.version_info import (
    VersionInfo,
    VersionInfoFormatError,
    VersionStatus,
)

__all__ = [
    "CACHE_KEY",
    "CACHE_TTL_SECONDS",
    "DEFAULT_GATEWAY_MESSAGES",
    "FileSystemKeyValueStore",
    "GitHubReleaseGateway",
    "KeyValueStore",
    "KeyValueStoreError",
    "ParsedVersion",
    "Release",
    "ReleaseGateway",
    "ReleaseGatewayCause",
    "ReleaseGatewayError",
    "Tag",
    "VersionCache",
    "VersionChecker",
    "VersionInfo",
    "VersionInfoFormatError",
    "VersionStatus",
    "build_version_checker",
    "compare_versions",
    "looks_like_semver",
    "parse_semver",
]
