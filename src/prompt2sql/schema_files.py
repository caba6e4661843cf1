"""Read uploaded schema files as raw text."""

from __future__ import annotations

from pathlib import Path

SCHEMA_FILE_SUFFIXES = frozenset({".sql", ".txt", ".json", ".csv"})


class SchemaFileError(RuntimeError):
    """Raised when a schema file cannot be accepted."""


def read_schema_file(path: Path) -> str:
    """Return the file's text verbatim. Only the suffix is checked."""
    if path.suffix.lower() not in SCHEMA_FILE_SUFFIXES:
        raise SchemaFileError(
            f"Unsupported schema file type {path.suffix or '(none)'!r}. "
            f"Use one of: {', '.join(sorted(SCHEMA_FILE_SUFFIXES))}."
        )
    if not path.is_file():
        raise SchemaFileError(f"Schema file does not exist: {path}")

    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SchemaFileError(f"Schema file is not UTF-8 text: {path}") from exc
    except OSError as exc:
        raise SchemaFileError(f"Failed to read schema file: {exc}") from exc
