"""
Database utilities for PostgreSQL operations.

Provides schema provisioning and single-row inserts for the person worker.
Every call opens its own autocommit connection; retries are the caller's
concern.
"""

import logging
from typing import Optional

import psycopg

from utils.config import settings
from utils.schemas import PersonRecord

logger = logging.getLogger(__name__)

CREATE_PERSONS_TABLE = """
    CREATE TABLE IF NOT EXISTS persons (
        id SERIAL PRIMARY KEY,
        first_name VARCHAR(100) NOT NULL,
        last_name VARCHAR(100) NOT NULL,
        address TEXT NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
    )
"""

INSERT_PERSON = """
    INSERT INTO persons (first_name, last_name, address, created_at)
    VALUES (%(first_name)s, %(last_name)s, %(address)s, %(created_at)s)
"""


class ConfigurationError(RuntimeError):
    """Raised when a required connection setting is missing."""


class PersonGateway:
    """Storage adapter for the persons table."""

    def __init__(self, dsn: Optional[str] = None, connect_timeout: Optional[int] = None) -> None:
        """
        Initialize gateway.

        Args:
            dsn: PostgreSQL connection string, defaults to settings.POSTGRES_DSN
            connect_timeout: Seconds to wait for a connection, defaults to
                settings.DB_CONNECT_TIMEOUT

        Raises:
            ConfigurationError: If no connection string is configured
        """
        self.dsn = dsn or settings.POSTGRES_DSN
        if not self.dsn:
            raise ConfigurationError("Postgres connection string is required (POSTGRES_DSN)")
        self.connect_timeout = connect_timeout or settings.DB_CONNECT_TIMEOUT

    async def _connect(self) -> psycopg.AsyncConnection:
        return await psycopg.AsyncConnection.connect(
            self.dsn,
            autocommit=True,
            connect_timeout=self.connect_timeout,
        )

    async def ensure_schema(self) -> None:
        """
        Create the persons table if it does not exist.

        Raises:
            psycopg.Error: If schema creation fails
        """
        try:
            async with await self._connect() as conn:
                await conn.execute(CREATE_PERSONS_TABLE)
        except Exception as e:
            logger.error("Error ensuring persons table exists: %s", str(e), exc_info=True)
            raise

        logger.info("DB schema ready", extra={"table": "persons"})

    async def insert_person(self, person: PersonRecord) -> None:
        """
        Insert one person row.

        Args:
            person: Decoded person record

        Raises:
            psycopg.Error: On connectivity loss, constraint violation or timeout
        """
        async with await self._connect() as conn:
            await conn.execute(
                INSERT_PERSON,
                {
                    "first_name": person.first_name,
                    "last_name": person.last_name,
                    "address": person.address,
                    "created_at": person.created_at,
                },
            )
