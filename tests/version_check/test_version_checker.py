from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from tests.version_check.adapters.fake_key_value_store import FakeKeyValueStore
from tests.version_check.adapters.fake_release_gateway import FakeReleaseGateway
from openload.core.config import VersionCheckConfig
from openload.version_check import (
    CACHE_KEY,
    FileSystemKeyValueStore,
    Release,
    Tag,
    VersionCache,
    VersionChecker,
    VersionInfo,
    VersionStatus,
    build_version_checker,
)


@pytest.fixture
def current_time_ms() -> int:
    return 1_765_278_683_000


def _checker(
    gateway: FakeReleaseGateway,
    store: FakeKeyValueStore,
    now: int,
    current_version: str = "1.0.0",
) -> VersionChecker:
    cache = VersionCache(store, current_version, get_current_time_ms=lambda: now)
    return VersionChecker(
        current_version, gateway, cache, get_current_time_ms=lambda: now
    )


def _release(tag_name: str) -> Release:
    return Release(
        tag_name=tag_name,
        html_url=f"https://github.com/nosift/gpt-load/releases/tag/{tag_name}",
    )


@pytest.mark.asyncio
async def test_reports_an_available_update_from_the_latest_release(
    current_time_ms: int,
) -> None:
    gateway = FakeReleaseGateway(release=_release("v1.1.0"))
    store = FakeKeyValueStore()

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert info == VersionInfo(
        current_version="1.0.0",
        latest_version="v1.1.0",
        is_latest=False,
        has_update=True,
        release_url="https://github.com/nosift/gpt-load/releases/tag/v1.1.0",
        last_check_time=current_time_ms,
        status=VersionStatus.UPDATE_AVAILABLE,
    )
    assert gateway.fetch_latest_tag_calls == 0
    assert json.loads(store.items[CACHE_KEY]) == info.to_dict()


@pytest.mark.parametrize("latest", ["v1.0.0", "0.9.9"])
@pytest.mark.asyncio
async def test_reports_latest_when_running_the_same_or_a_newer_version(
    current_time_ms: int, latest: str
) -> None:
    gateway = FakeReleaseGateway(release=_release(latest))

    info = await _checker(
        gateway, FakeKeyValueStore(), current_time_ms
    ).check_for_updates()

    assert info.status is VersionStatus.LATEST
    assert info.is_latest is True
    assert info.has_update is False


@pytest.mark.asyncio
async def test_never_reports_an_update_for_a_branch_build(
    current_time_ms: int,
) -> None:
    gateway = FakeReleaseGateway(release=_release("v9.9.9"))

    info = await _checker(
        gateway, FakeKeyValueStore(), current_time_ms, current_version="main"
    ).check_for_updates()

    assert info.status is VersionStatus.LATEST
    assert info.has_update is False
    assert info.latest_version == "v9.9.9"


@pytest.mark.asyncio
async def test_falls_back_to_tags_when_there_is_no_release(
    current_time_ms: int,
) -> None:
    gateway = FakeReleaseGateway(release=None, tag=Tag(name="v1.2.0"))
    store = FakeKeyValueStore()

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert gateway.fetch_latest_release_calls == 1
    assert gateway.fetch_latest_tag_calls == 1
    assert info.latest_version == "v1.2.0"
    assert info.release_url == "https://example.test/releases/tag/v1.2.0"
    assert info.status is VersionStatus.UPDATE_AVAILABLE
    assert CACHE_KEY in store.items


@pytest.mark.asyncio
async def test_returns_error_without_caching_when_nothing_is_found(
    current_time_ms: int,
) -> None:
    gateway = FakeReleaseGateway(release=None, tag=None)
    store = FakeKeyValueStore()

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert info.status is VersionStatus.ERROR
    assert info.is_latest is False
    assert info.has_update is False
    assert info.latest_version is None
    assert store.set_item_calls == 0
    assert store.items == {}


@pytest.mark.asyncio
async def test_returns_error_when_the_gateway_blows_up(current_time_ms: int) -> None:
    gateway = FakeReleaseGateway(error=RuntimeError("unexpected"))
    store = FakeKeyValueStore()

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert info.status is VersionStatus.ERROR
    assert store.set_item_calls == 0


@pytest.mark.asyncio
async def test_retries_immediately_after_an_error(current_time_ms: int) -> None:
    gateway = FakeReleaseGateway(release=None, tag=None)
    checker = _checker(gateway, FakeKeyValueStore(), current_time_ms)

    await checker.check_for_updates()
    await checker.check_for_updates()

    assert gateway.fetch_latest_release_calls == 2


@pytest.mark.asyncio
async def test_serves_a_fresh_cached_result_without_network(
    current_time_ms: int,
) -> None:
    cached = VersionInfo(
        current_version="1.0.0",
        latest_version="v1.0.0",
        is_latest=True,
        has_update=False,
        release_url="https://github.com/nosift/gpt-load/releases/tag/v1.0.0",
        last_check_time=current_time_ms - 10 * 60 * 1000,
        status=VersionStatus.LATEST,
    )
    gateway = FakeReleaseGateway(release=_release("v2.0.0"))
    store = FakeKeyValueStore({CACHE_KEY: json.dumps(cached.to_dict())})

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert info == cached
    assert gateway.fetch_latest_release_calls == 0


@pytest.mark.asyncio
async def test_checks_again_once_the_cache_expired(current_time_ms: int) -> None:
    cached = VersionInfo.checking("1.0.0", current_time_ms - 31 * 60 * 1000)
    gateway = FakeReleaseGateway(release=_release("v2.0.0"))
    store = FakeKeyValueStore({CACHE_KEY: json.dumps(cached.to_dict())})

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert gateway.fetch_latest_release_calls == 1
    assert info.latest_version == "v2.0.0"
    assert info.last_check_time == current_time_ms


@pytest.mark.asyncio
async def test_still_returns_a_result_when_caching_fails(
    current_time_ms: int,
) -> None:
    gateway = FakeReleaseGateway(release=_release("v1.1.0"))
    store = FakeKeyValueStore(fail_writes=True)

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert info.status is VersionStatus.UPDATE_AVAILABLE
    assert store.set_item_calls == 1


@pytest.mark.asyncio
async def test_clear_cache_forces_a_new_check(current_time_ms: int) -> None:
    gateway = FakeReleaseGateway(release=_release("v1.0.0"))
    checker = _checker(gateway, FakeKeyValueStore(), current_time_ms)

    await checker.check_for_updates()
    await checker.check_for_updates()
    await checker.clear_cache()
    await checker.check_for_updates()

    assert gateway.fetch_latest_release_calls == 2


def test_exposes_the_running_version(current_time_ms: int) -> None:
    checker = _checker(
        FakeReleaseGateway(), FakeKeyValueStore(), current_time_ms, "1.4.2"
    )

    assert checker.get_current_version() == "1.4.2"


@pytest.mark.asyncio
async def test_builds_a_working_checker_from_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    requested_paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested_paths.append(request.url.path)
        if request.url.path.endswith("/releases/latest"):
            return httpx.Response(status_code=httpx.codes.NOT_FOUND)
        return httpx.Response(status_code=httpx.codes.OK, json=[{"name": "v1.2.0"}])

    real_client = httpx.AsyncClient

    def client_factory(*args: object, **kwargs: object) -> httpx.AsyncClient:
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)

    config = VersionCheckConfig(current_version="1.2.0", cache_dir=tmp_path)
    checker = build_version_checker(config)

    info = await checker.check_for_updates()
    again = await checker.check_for_updates()

    assert requested_paths == [
        "/repos/nosift/gpt-load/releases/latest",
        "/repos/nosift/gpt-load/tags",
    ]
    assert info.status is VersionStatus.LATEST
    assert info.release_url == "https://github.com/nosift/gpt-load/releases/tag/v1.2.0"
    assert again == info
    assert (tmp_path / f"{CACHE_KEY}.json").exists()


@pytest.mark.parametrize(
    ("release", "tag"),
    [(None, Tag(name="")), (_release("  "), Tag(name=" "))],
    ids=["empty_tag", "blank_release_and_tag"],
)
@pytest.mark.asyncio
async def test_returns_error_without_caching_when_only_blank_names_are_found(
    current_time_ms: int, release: Release | None, tag: Tag
) -> None:
    gateway = FakeReleaseGateway(release=release, tag=tag)
    store = FakeKeyValueStore()

    info = await _checker(gateway, store, current_time_ms).check_for_updates()

    assert info.status is VersionStatus.ERROR
    assert info.latest_version is None
    assert info.release_url is None
    assert store.set_item_calls == 0


@pytest.mark.asyncio
async def test_clear_cache_does_not_raise_when_the_store_rejects_the_key(
    tmp_path: Path, current_time_ms: int
) -> None:
    cache = VersionCache(
        FileSystemKeyValueStore(base_path=tmp_path),
        "1.0.0",
        key="a/b",
        get_current_time_ms=lambda: current_time_ms,
    )
    checker = VersionChecker("1.0.0", FakeReleaseGateway(), cache)

    await checker.clear_cache()

    assert list(tmp_path.iterdir()) == []
