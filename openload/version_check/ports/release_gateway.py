from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Release:
    tag_name: str
    html_url: str
    name: str | None = None
    published_at: str | None = None


@dataclass(frozen=True, slots=True)
class Tag:
    name: str


class ReleaseGatewayCause(StrEnum):
    @staticmethod
    def _generate_next_value_(
        name: str, start: int, count: int, last_values: list[str]
    ) -> str:
        return name.lower()

    TOO_MANY_REQUESTS = auto()
    FORBIDDEN = auto()
    NOT_FOUND = auto()
    REQUEST_FAILED = auto()
    ERROR_RESPONSE = auto()
    INVALID_RESPONSE = auto()
    UNKNOWN = auto()


DEFAULT_GATEWAY_MESSAGES: dict[ReleaseGatewayCause, str] = {
    ReleaseGatewayCause.TOO_MANY_REQUESTS: "Rate limit exceeded while checking for updates.",
    ReleaseGatewayCause.FORBIDDEN: "Request was forbidden while checking for updates.",
    ReleaseGatewayCause.NOT_FOUND: "No published release was found.",
    ReleaseGatewayCause.REQUEST_FAILED: "Network error while checking for updates.",
    ReleaseGatewayCause.ERROR_RESPONSE: "Unexpected response received while checking for updates.",
    ReleaseGatewayCause.INVALID_RESPONSE: "Received an invalid response while checking for updates.",
    ReleaseGatewayCause.UNKNOWN: "Unable to determine whether an update is available.",
}


class ReleaseGatewayError(Exception):
    def __init__(
        self, *, cause: ReleaseGatewayCause, message: str | None = None
    ) -> None:
        self.cause = cause
        detail = message or DEFAULT_GATEWAY_MESSAGES.get(
            cause, DEFAULT_GATEWAY_MESSAGES[ReleaseGatewayCause.UNKNOWN]
        )
        super().__init__(detail)


class ReleaseGateway(Protocol):
    """Read side of a release feed.

    Both fetch methods report every failure as ``None``; they never raise.
    """

    async def fetch_latest_release(self) -> Release | None: ...
    async def fetch_latest_tag(self) -> Tag | None: ...
    def tag_url(self, tag_name: str) -> str: ...
