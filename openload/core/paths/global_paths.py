from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path


class GlobalPath:
    def __init__(self, resolver: Callable[[], Path]) -> None:
        self._resolver = resolver

    @property
    def path(self) -> Path:
        return self._resolver()


_DEFAULT_OPENLOAD_HOME = Path.home() / ".openload"


def _get_openload_home() -> Path:
    if openload_home := os.getenv("OPENLOAD_HOME"):
        return Path(openload_home).expanduser().resolve()
    return _DEFAULT_OPENLOAD_HOME


OPENLOAD_HOME = GlobalPath(_get_openload_home)
GLOBAL_CONFIG_FILE = GlobalPath(lambda: OPENLOAD_HOME.path / "config.toml")
CACHE_DIR = GlobalPath(lambda: OPENLOAD_HOME.path / "cache")
LOG_FILE = GlobalPath(lambda: OPENLOAD_HOME.path / "openload.log")
