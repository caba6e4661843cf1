"""JSON export of saved records."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from prompt2sql.records.connection import RecordStoreError
from prompt2sql.records.repository import SavedQuery, SavedSchema

EXPORT_KINDS = ("queries", "schemas")


def export_filename(kind: str, today: date) -> str:
    return f"{kind}_export_{today.isoformat()}.json"


def export_records(
    records: Sequence[SavedQuery | SavedSchema],
    kind: str,
    output_dir: Path,
    today: date | None = None,
) -> Path:
    """Write ``records`` as an indented JSON array and return the file path."""
    if kind not in EXPORT_KINDS:
        raise RecordStoreError(
            f"Unknown export kind {kind!r}. Use one of: {', '.join(EXPORT_KINDS)}."
        )

    path = output_dir / export_filename(kind, today or date.today())
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps([record.to_dict() for record in records], indent=2) + "\n",
            encoding="utf-8",
        )
    except OSError as exc:
        raise RecordStoreError(f"Failed to write export file: {exc}") from exc
    return path
