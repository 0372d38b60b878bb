from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10

    @classmethod
    def from_mapping(cls, values: Mapping) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict."""

        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values.get("password", "")),
            database=str(values["database"]),
            connect_timeout=int(values.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """Process-wide connection factory for the school attendance database.

    Every repository call opens its own short-lived connection, so attendance
    saves run in their own transaction.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def database(self) -> str:
        return self._config.database

    def connect(self):
        # utf8mb4 so student names keep non-latin characters
        return mysql.connector.connect(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            charset="utf8mb4",
            autocommit=False,
            connection_timeout=self._config.connect_timeout,
        )
