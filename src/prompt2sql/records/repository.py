"""Insert and list saved queries and schemas scoped by user."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import psycopg
from psycopg.rows import dict_row

from prompt2sql.records.connection import RecordStoreError, connect
from prompt2sql.records.queries import (
    CREATE_QUERIES_TABLE,
    CREATE_SCHEMAS_TABLE,
    INSERT_QUERY,
    INSERT_SCHEMA,
    SELECT_QUERIES,
    SELECT_SCHEMAS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedQuery:
    id: int
    user_id: str
    prompt: str
    sql_result: str
    schema: str
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "prompt": self.prompt,
            "sql_result": self.sql_result,
            "schema": self.schema,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class SavedSchema:
    id: int
    user_id: str
    name: str
    schema_sql: str
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "schema_sql": self.schema_sql,
            "created_at": self.created_at.isoformat(),
        }


def _like_pattern(search: str | None) -> str | None:
    if search is None or not search.strip():
        return None
    escaped = (
        search.strip()
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


def _fetch(
    database_url: str, statement: str, params: dict[str, Any]
) -> list[dict[str, Any]]:
    try:
        with connect(database_url) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(statement, params)
                return list(cur.fetchall())
    except RecordStoreError:
        raise
    except psycopg.Error as exc:
        raise RecordStoreError(f"Record store statement failed: {exc}") from exc


def ensure_tables(database_url: str) -> None:
    """Create the record tables when they do not exist yet."""
    try:
        with connect(database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(CREATE_QUERIES_TABLE)
                cur.execute(CREATE_SCHEMAS_TABLE)
    except RecordStoreError:
        raise
    except psycopg.Error as exc:
        raise RecordStoreError(f"Failed to create record tables: {exc}") from exc


def save_query(
    database_url: str, *, user_id: str, prompt: str, sql: str, schema: str
) -> SavedQuery:
    """Persist a generated query with the prompt and schema it came from."""
    rows = _fetch(
        database_url,
        INSERT_QUERY,
        {"user_id": user_id, "prompt": prompt, "sql_result": sql, "schema": schema},
    )
    if not rows:
        raise RecordStoreError("Saving the query returned no row.")
    logger.info("Saved query %s for user %s", rows[0]["id"], user_id)
    return SavedQuery(**rows[0])


def save_schema(
    database_url: str, *, user_id: str, name: str, schema_text: str
) -> SavedSchema:
    """Persist an uploaded schema under a display name."""
    if not name.strip():
        raise RecordStoreError("Schema name cannot be empty.")
    rows = _fetch(
        database_url,
        INSERT_SCHEMA,
        {"user_id": user_id, "name": name.strip(), "schema_sql": schema_text},
    )
    if not rows:
        raise RecordStoreError("Saving the schema returned no row.")
    logger.info("Saved schema %s for user %s", rows[0]["id"], user_id)
    return SavedSchema(**rows[0])


def list_queries(
    database_url: str, *, user_id: str, search: str | None = None
) -> list[SavedQuery]:
    """Saved queries for ``user_id``, newest first, optionally filtered."""
    rows = _fetch(
        database_url,
        SELECT_QUERIES,
        {"user_id": user_id, "pattern": _like_pattern(search)},
    )
    return [SavedQuery(**row) for row in rows]


def list_schemas(
    database_url: str, *, user_id: str, search: str | None = None
) -> list[SavedSchema]:
    """Saved schemas for ``user_id``, newest first, optionally filtered."""
    rows = _fetch(
        database_url,
        SELECT_SCHEMAS,
        {"user_id": user_id, "pattern": _like_pattern(search)},
    )
    return [SavedSchema(**row) for row in rows]
