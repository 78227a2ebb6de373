from __future__ import annotations

import os
from pathlib import Path
import tomllib
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from openload import __version__
from openload.core.paths.global_paths import CACHE_DIR, GLOBAL_CONFIG_FILE

CONFIG_SECTION = "version_check"

ENV_OVERRIDES: dict[str, str] = {
    "OPENLOAD_VERSION": "current_version",
    "OPENLOAD_RELEASE_OWNER": "owner",
    "OPENLOAD_RELEASE_REPOSITORY": "repository",
    "GITHUB_TOKEN": "github_token",
}


class ConfigError(Exception):
    pass


class VersionCheckConfig(BaseModel):
    owner: str = "nosift"
    repository: str = "gpt-load"
    current_version: str = __version__
    cache_ttl_seconds: int = Field(default=30 * 60, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)
    api_base_url: str = "https://api.github.com"
    html_base_url: str = "https://github.com"
    github_token: str | None = None
    cache_dir: Path | None = None

    @property
    def resolved_cache_dir(self) -> Path:
        return self.cache_dir if self.cache_dir is not None else CACHE_DIR.path

    @classmethod
    def load(cls, path: Path | None = None) -> VersionCheckConfig:
        """Build the config from defaults, the config file, then the environment.

        A missing config file is not an error; an unreadable or invalid one is.
        """
        config_file = path if path is not None else GLOBAL_CONFIG_FILE.path
        values = _read_config_section(config_file)

        for env_var, field_name in ENV_OVERRIDES.items():
            if value := os.getenv(env_var):
                values[field_name] = value

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {config_file}: {exc}") from exc


def _read_config_section(config_file: Path) -> dict[str, Any]:
    try:
        content = config_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_file}: {exc}") from exc

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {config_file}: {exc}") from exc

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION}] in {config_file} must be a table")
    return dict(section)
