from __future__ import annotations

import asyncio
from pathlib import Path
import re

from openload.core.paths.global_paths import CACHE_DIR
from openload.version_check.ports.key_value_store import (
    KeyValueStore,
    KeyValueStoreError,
)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileSystemKeyValueStore(KeyValueStore):
    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base_path = Path(base_path) if base_path is not None else CACHE_DIR.path

    def _file_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key) or key in {".", ".."}:
            raise KeyValueStoreError(f"Invalid cache key: {key!r}")
        return self._base_path / f"{key}.json"

    async def get_item(self, key: str) -> str | None:
        cache_file = self._file_for(key)
        try:
            return await asyncio.to_thread(cache_file.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise KeyValueStoreError(f"Cannot read {cache_file}: {exc}") from exc

    async def set_item(self, key: str, value: str) -> None:
        cache_file = self._file_for(key)
        try:
            await asyncio.to_thread(self._write, cache_file, value)
        except OSError as exc:
            raise KeyValueStoreError(f"Cannot write {cache_file}: {exc}") from exc

    async def remove_item(self, key: str) -> None:
        cache_file = self._file_for(key)
        try:
            await asyncio.to_thread(cache_file.unlink, missing_ok=True)
        except OSError as exc:
            raise KeyValueStoreError(f"Cannot remove {cache_file}: {exc}") from exc

    @staticmethod
    def _write(cache_file: Path, value: str) -> None:
        cache_file.parent.mkdir(parents=True, exist_ok=True)
        cache_file.write_text(value, encoding="utf-8")
