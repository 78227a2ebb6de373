from __future__ import annotations

from pathlib import Path

import pytest

from openload.core.config import ENV_OVERRIDES


@pytest.fixture(autouse=True)
def openload_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> Path:
    home = tmp_path_factory.mktemp("openload_home")
    monkeypatch.setenv("OPENLOAD_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def _clear_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    for env_var in ENV_OVERRIDES:
        monkeypatch.delenv(env_var, raising=False)
