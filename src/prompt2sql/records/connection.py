"""PostgreSQL connection and health check utilities for the record store."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import psycopg

from prompt2sql.records.queries import HEALTHCHECK


class RecordStoreError(RuntimeError):
    """Raised when a record store connection or statement fails."""


@dataclass(frozen=True)
class HealthcheckResult:
    """Information returned by a successful record store health check."""

    current_database: str
    current_user: str
    server_version: str


@contextmanager
def connect(database_url: str) -> Iterator[psycopg.Connection]:
    """Open a PostgreSQL connection; the transaction commits on clean exit."""
    try:
        with psycopg.connect(database_url, connect_timeout=5) as conn:
            yield conn
    except psycopg.Error as exc:
        raise RecordStoreError(
            f"Record store request failed: {exc}"
        ) from exc


def check_record_store_health(database_url: str) -> HealthcheckResult:
    """Run a lightweight round trip against the record store."""
    try:
        with connect(database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(HEALTHCHECK)
                row = cur.fetchone()
    except RecordStoreError:
        raise
    except psycopg.Error as exc:
        raise RecordStoreError(f"Record store health check failed: {exc}") from exc

    if row is None:
        raise RecordStoreError("Record store health check returned no data.")

    current_database, current_user, server_version = row
    return HealthcheckResult(
        current_database=current_database,
        current_user=current_user,
        server_version=server_version,
    )
