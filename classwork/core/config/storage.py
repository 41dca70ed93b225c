from __future__ import annotations

import typing as t
from pathlib import Path

import pydantic as p

from .base import BaseSettings


class ObjectSettings(BaseSettings):
    """Object storage for submission attachments."""

    backend: t.Literal["local"] = "local"
    local_path: Path | None = None
    url_prefix: str = "/uploads"


class DatabaseSettings(BaseSettings):
    driver: t.Literal["postgresql+psycopg", "sqlite+pysqlite"] = "postgresql+psycopg"
    host: p.IPvAnyAddress | str | None = None
    port: int | None = None
    database: str | None = None
    echo: bool = False

    @p.model_validator(mode="after")
    def check_database(self) -> DatabaseSettings:
        # sqlite treats a missing database as :memory:
        if self.driver == "postgresql+psycopg" and not self.database:
            raise ValueError("a postgresql database name is required")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.driver.startswith("sqlite")


class PersistentSettings(BaseSettings):
    database: DatabaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings
    object: ObjectSettings = ObjectSettings()
