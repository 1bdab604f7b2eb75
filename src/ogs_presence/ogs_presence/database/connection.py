from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    charset: str = "utf8mb4"
    connect_timeout: int = 10

    @classmethod
    def from_mapping(cls, values: Mapping) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict; missing port defaults to 3306."""
        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values.get("password", "")),
            database=str(values["database"]),
        )


class DatabaseConnection:
    """Connection factory handed to every MySQL repository.

    Each repository call opens its own short-lived connection through
    ``db_cursor``; open-row uniqueness lives in the schema, so no state is
    shared between calls.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            charset=self._config.charset,
            connection_timeout=self._config.connect_timeout,
            autocommit=False,
        )
