from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from openload.version_check.ports.release_gateway import (
    Release,
    ReleaseGateway,
    ReleaseGatewayCause,
    ReleaseGatewayError,
    Tag,
)
from openload.version_check.semver import looks_like_semver

logger = logging.getLogger(__name__)

TAGS_PER_PAGE = 100


class GitHubReleaseGateway(ReleaseGateway):
    def __init__(
        self,
        owner: str,
        repository: str,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        base_url: str = "https://api.github.com",
        html_base_url: str = "https://github.com",
    ) -> None:
        self._owner = owner
        self._repository = repository
        self._token = token
        self._client = client
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._html_base_url = html_base_url.rstrip("/")

    async def fetch_latest_release(self) -> Release | None:
        try:
            data = await self._get_json(
                f"/repos/{self._owner}/{self._repository}/releases/latest"
            )
            return self._parse_release(data)
        except ReleaseGatewayError as error:
            _log_gateway_error("latest release", error)
            return None

    async def fetch_latest_tag(self) -> Tag | None:
        try:
            data = await self._get_json(
                f"/repos/{self._owner}/{self._repository}/tags",
                params={"per_page": TAGS_PER_PAGE},
            )
        except ReleaseGatewayError as error:
            _log_gateway_error("tags", error)
            return None

        if not isinstance(data, list):
            _log_gateway_error(
                "tags", ReleaseGatewayError(cause=ReleaseGatewayCause.INVALID_RESPONSE)
            )
            return None

        return _select_tag(data)

    def tag_url(self, tag_name: str) -> str:
        return (
            f"{self._html_base_url}/{self._owner}/{self._repository}"
            f"/releases/tag/{quote(tag_name, safe='')}"
        )

    def _parse_release(self, data: Any) -> Release | None:
        if not isinstance(data, dict):
            raise ReleaseGatewayError(cause=ReleaseGatewayCause.INVALID_RESPONSE)

        tag_name = data.get("tag_name")
        if not _is_non_blank_str(tag_name):
            return None

        html_url = data.get("html_url")
        return Release(
            tag_name=tag_name,
            html_url=html_url if isinstance(html_url, str) else self.tag_url(tag_name),
            name=_optional_str(data.get("name")),
            published_at=_optional_str(data.get("published_at")),
        )

    async def _get_json(
        self, request_path: str, params: dict[str, Any] | None = None
    ) -> Any:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "openload-version-check",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            if self._client is not None:
                response = await self._client.get(
                    f"{self._base_url}{request_path}",
                    headers=headers,
                    params=params,
                    timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(
                    base_url=self._base_url, timeout=self._timeout
                ) as client:
                    response = await client.get(
                        request_path, headers=headers, params=params
                    )
        except httpx.RequestError as exc:
            raise ReleaseGatewayError(cause=ReleaseGatewayCause.REQUEST_FAILED) from exc

        rate_limit_remaining = response.headers.get("X-RateLimit-Remaining")
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS or (
            rate_limit_remaining is not None and rate_limit_remaining == "0"
        ):
            raise ReleaseGatewayError(cause=ReleaseGatewayCause.TOO_MANY_REQUESTS)

        if response.status_code == httpx.codes.FORBIDDEN:
            raise ReleaseGatewayError(cause=ReleaseGatewayCause.FORBIDDEN)

        if response.status_code == httpx.codes.NOT_FOUND:
            raise ReleaseGatewayError(cause=ReleaseGatewayCause.NOT_FOUND)

        if not response.is_success:
            raise ReleaseGatewayError(
                cause=ReleaseGatewayCause.ERROR_RESPONSE,
                message=f"Unexpected status {response.status_code} from {request_path}",
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ReleaseGatewayError(
                cause=ReleaseGatewayCause.INVALID_RESPONSE
            ) from exc


def _select_tag(data: list[Any]) -> Tag | None:
    # the tag list is not ordered by version, prefer the first one that looks like a release
    names = [
        entry["name"]
        for entry in data
        if isinstance(entry, dict) and _is_non_blank_str(entry.get("name"))
    ]
    if not names:
        return None
    for name in names:
        if looks_like_semver(name):
            return Tag(name=name)
    return Tag(name=names[0])


def _is_non_blank_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _log_gateway_error(what: str, error: ReleaseGatewayError) -> None:
    # a missing "latest release" is expected for repositories that only push tags
    level = (
        logging.INFO
        if error.cause is ReleaseGatewayCause.NOT_FOUND
        else logging.WARNING
    )
    logger.log(
        level,
        "Failed to fetch %s from GitHub (%s): %s",
        what,
        error.cause,
        error,
        exc_info=error.__cause__ is not None,
    )
