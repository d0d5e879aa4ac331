from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from uifs.bundle import open_bundle
from uifs.errors import ConfigurationError
from uifs.fallback import FallbackFS
from uifs.protocols import FileSystem

PROCESS_START = datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Read a naive datetime as UTC; aware values are returned unchanged."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "uifs.env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server
    app_host: str = Field(default="127.0.0.1", alias="APP_HOST")
    app_port: int = Field(default=8080, alias="APP_PORT")
    app_env: str = Field(default="prod", alias="APP_ENV")  # dev|prod

    # Bundle: a directory, a .zip archive or pkg:<package>[/<subdir>]
    bundle: str | None = Field(default=None, alias="UIFS_BUNDLE")
    prefix: str = Field(default="", alias="UIFS_PREFIX")
    fallback_path: str = Field(default="index.html", alias="UIFS_FALLBACK_PATH")
    build_time: datetime = Field(default_factory=lambda: PROCESS_START, alias="UIFS_BUILD_TIME")

    @field_validator("build_time")
    @classmethod
    def build_time_as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        unknown = set(overrides) - set(type(self).model_fields)
        if unknown:
            raise ConfigurationError(f"unknown settings: {', '.join(sorted(unknown))}")
        update = {k: v for k, v in overrides.items() if v is not None}
        if "build_time" in update:
            update["build_time"] = as_utc(update["build_time"])
        return self.model_copy(update=update)


def build_filesystem(
    bundle: FileSystem | str | Path | None = None,
    settings: Settings | None = None,
    **overrides: Any,
) -> FallbackFS:
    """Build the fallback filesystem from settings plus named overrides.

    ``bundle`` may be a filesystem object or a bundle location; when omitted
    the configured ``bundle`` location is used.
    """
    cfg = (settings or Settings()).with_overrides(**overrides)

    if bundle is None:
        if not cfg.bundle:
            raise ConfigurationError("no bundle configured (set UIFS_BUNDLE or pass a bundle)")
        bundle = cfg.bundle
    fs = open_bundle(bundle) if isinstance(bundle, (str, Path)) else bundle

    return FallbackFS(fs, cfg.prefix, cfg.fallback_path, cfg.build_time)
