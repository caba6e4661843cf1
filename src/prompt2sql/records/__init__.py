"""PostgreSQL-backed store for saved queries and schemas."""

from prompt2sql.records.connection import (
    HealthcheckResult,
    RecordStoreError,
    check_record_store_health,
    connect,
)
from prompt2sql.records.export import EXPORT_KINDS, export_records
from prompt2sql.records.repository import (
    SavedQuery,
    SavedSchema,
    ensure_tables,
    list_queries,
    list_schemas,
    save_query,
    save_schema,
)

__all__ = [
    "EXPORT_KINDS",
    "HealthcheckResult",
    "RecordStoreError",
    "SavedQuery",
    "SavedSchema",
    "check_record_store_health",
    "connect",
    "ensure_tables",
    "export_records",
    "list_queries",
    "list_schemas",
    "save_query",
    "save_schema",
]
