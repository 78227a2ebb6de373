from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class VersionStatus(StrEnum):
    CHECKING = "checking"
    LATEST = "latest"
    UPDATE_AVAILABLE = "update-available"
    ERROR = "error"


class VersionInfoFormatError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class VersionInfo:
    current_version: str
    latest_version: str | None
    is_latest: bool
    has_update: bool
    release_url: str | None
    last_check_time: int
    status: VersionStatus

    @classmethod
    def checking(cls, current_version: str, last_check_time: int) -> VersionInfo:
        return cls(
            current_version=current_version,
            latest_version=None,
            is_latest=False,
            has_update=False,
            release_url=None,
            last_check_time=last_check_time,
            status=VersionStatus.CHECKING,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentVersion": self.current_version,
            "latestVersion": self.latest_version,
            "isLatest": self.is_latest,
            "hasUpdate": self.has_update,
            "releaseUrl": self.release_url,
            "lastCheckTime": self.last_check_time,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VersionInfo:
        if not isinstance(data, Mapping):
            raise VersionInfoFormatError("version info must be a JSON object")

        try:
            status = VersionStatus(data["status"])
            info = cls(
                current_version=data["currentVersion"],
                latest_version=data["latestVersion"],
                is_latest=data["isLatest"],
                has_update=data["hasUpdate"],
                release_url=data["releaseUrl"],
                last_check_time=data["lastCheckTime"],
                status=status,
            )
        except KeyError as exc:
            raise VersionInfoFormatError(f"missing field {exc.args[0]!r}") from exc
        except ValueError as exc:
            raise VersionInfoFormatError(f"unknown status {data['status']!r}") from exc

        _check_types(info)
        return info


def _check_types(info: VersionInfo) -> None:
    if not isinstance(info.current_version, str):
        raise VersionInfoFormatError("currentVersion must be a string")
    for name, value in (
        ("latestVersion", info.latest_version),
        ("releaseUrl", info.release_url),
    ):
        if value is not None and not isinstance(value, str):
            raise VersionInfoFormatError(f"{name} must be a string or null")
    if not isinstance(info.is_latest, bool) or not isinstance(info.has_update, bool):
        raise VersionInfoFormatError("isLatest and hasUpdate must be booleans")
    # bool is an int subclass, a boolean timestamp is still malformed
    if isinstance(info.last_check_time, bool) or not isinstance(
        info.last_check_time, int
    ):
        raise VersionInfoFormatError("lastCheckTime must be an integer")
    if info.is_latest and info.has_update:
        raise VersionInfoFormatError("isLatest and hasUpdate cannot both be true")
