"""Command-line entrypoint for prompt2sql."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from prompt2sql import __version__
from prompt2sql.config import ConfigError, Settings, load_settings
from prompt2sql.llm import (
    PROVIDERS,
    ProviderError,
    ProviderRequestClient,
    UnsupportedProviderError,
    load_request_config,
)
from prompt2sql.logging import configure_logging, redact_secret
from prompt2sql.prompts import PromptBuildError
from prompt2sql.records import (
    EXPORT_KINDS,
    RecordStoreError,
    check_record_store_health,
    ensure_tables,
    export_records,
    list_queries,
    list_schemas,
    save_query,
    save_schema,
)
from prompt2sql.schema_files import SchemaFileError, read_schema_file
from prompt2sql.sql import analyze_query
from prompt2sql.store import (
    CredentialStoreError,
    JsonFileCredentialStore,
    active_provider,
    get_credential,
    save_credential,
    select_provider,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prompt2sql",
        description="Turn natural language into SQL with a hosted LLM provider.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "config-check",
        help="Validate environment configuration for prompt2sql.",
    )
    subparsers.add_parser(
        "providers",
        help="List supported providers and which one is active.",
    )
    use_parser = subparsers.add_parser(
        "use-provider",
        help="Select the provider used for SQL generation.",
    )
    use_parser.add_argument("provider", help="Provider identifier.")
    key_parser = subparsers.add_parser(
        "set-key",
        help="Save an API key for a provider.",
    )
    key_parser.add_argument("provider", help="Provider identifier.")
    key_parser.add_argument("api_key", help="API key to store locally.")

    generate_parser = subparsers.add_parser(
        "generate-sql",
        help="Generate SQL for a natural language request.",
    )
    generate_parser.add_argument("prompt", help="Natural language request.")
    schema_group = generate_parser.add_mutually_exclusive_group()
    schema_group.add_argument("--schema", default="", help="Schema text.")
    schema_group.add_argument(
        "--schema-file",
        type=Path,
        default=None,
        help="Read schema text from a .sql, .txt, .json or .csv file.",
    )
    generate_parser.add_argument(
        "--save",
        action="store_true",
        help="Save the generated query to the record store.",
    )
    generate_parser.add_argument(
        "--insights",
        action="store_true",
        help="Print performance hints for the generated SQL.",
    )

    insights_parser = subparsers.add_parser(
        "insights",
        help="Print performance hints for a SQL statement.",
    )
    insights_parser.add_argument("sql", help="SQL statement.")

    save_schema_parser = subparsers.add_parser(
        "save-schema",
        help="Save a schema file to the record store.",
    )
    save_schema_parser.add_argument("name", help="Display name for the schema.")
    save_schema_parser.add_argument("schema_file", type=Path, help="Schema file.")

    for name, noun in (("list-queries", "queries"), ("list-schemas", "schemas")):
        list_parser = subparsers.add_parser(name, help=f"List saved {noun}.")
        list_parser.add_argument(
            "--search",
            default=None,
            help=f"Only show {noun} containing this text (case-insensitive).",
        )

    export_parser = subparsers.add_parser(
        "export",
        help="Export saved queries or schemas as JSON.",
    )
    export_parser.add_argument("kind", choices=EXPORT_KINDS)
    export_parser.add_argument("--search", default=None)
    export_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the export file (default: current directory).",
    )
    subparsers.add_parser(
        "healthcheck",
        help="Check record store connectivity.",
    )
    return parser


def _store(settings: Settings) -> JsonFileCredentialStore:
    return JsonFileCredentialStore(settings.store_path)


def _config_check(settings: Settings, args: argparse.Namespace) -> int:
    print("Configuration loaded successfully:")
    print(f"- PROMPT2SQL_STORE_PATH: {settings.store_path}")
    print(f"- DATABASE_URL: {'***' if settings.database_url else '(not set)'}")
    print(f"- PROMPT2SQL_USER_ID: {settings.user_id}")
    print(f"- PROMPT2SQL_LOG_LEVEL: {settings.log_level}")
    print(f"- PROMPT2SQL_LOG_FILE: {settings.log_file or '(not set)'}")
    return 0


def _providers(settings: Settings, args: argparse.Namespace) -> int:
    store = _store(settings)
    active = active_provider(store)
    print("Providers:")
    for provider_id in sorted(PROVIDERS):
        provider = PROVIDERS[provider_id]
        key = get_credential(store, provider_id)
        marker = " [active]" if provider_id == active.id else ""
        key_state = redact_secret(key) if key else "(no key)"
        print(f"- {provider_id}{marker}: {provider.display_name}, model={provider.model}")
        print(f"  key: {key_state}")
    return 0


def _use_provider(settings: Settings, args: argparse.Namespace) -> int:
    provider = select_provider(_store(settings), args.provider)
    print(f"Active provider set to {provider.display_name} ({provider.id}).")
    return 0


def _set_key(settings: Settings, args: argparse.Namespace) -> int:
    store = _store(settings)
    warning = save_credential(store, args.provider, args.api_key)
    if warning:
        print(f"Warning: {warning}", file=sys.stderr)
    print(f"API key saved for {args.provider}.")
    return 0


def _generate_sql(settings: Settings, args: argparse.Namespace) -> int:
    if args.save:
        settings.validate_record_store_requirements()

    schema = read_schema_file(args.schema_file) if args.schema_file else args.schema
    store = _store(settings)
    config = load_request_config(store)
    client = ProviderRequestClient(store)
    sql = asyncio.run(client.generate_with_config(args.prompt, schema, config))

    print(f"SQL generated with {config.provider.display_name}:")
    print(sql)

    if args.insights:
        print("\nInsights:")
        for hint in analyze_query(sql):
            print(f"- {hint}")

    if args.save:
        ensure_tables(settings.database_url)
        saved = save_query(
            settings.database_url,
            user_id=settings.user_id,
            prompt=args.prompt,
            sql=sql,
            schema=schema,
        )
        print(f"\nQuery saved (id={saved.id}).")
    return 0


def _insights(settings: Settings, args: argparse.Namespace) -> int:
    hints = analyze_query(args.sql)
    print("Insights:")
    if not hints:
        print("- (none)")
    for hint in hints:
        print(f"- {hint}")
    return 0


def _save_schema(settings: Settings, args: argparse.Namespace) -> int:
    settings.validate_record_store_requirements()
    schema_text = read_schema_file(args.schema_file)
    ensure_tables(settings.database_url)
    saved = save_schema(
        settings.database_url,
        user_id=settings.user_id,
        name=args.name,
        schema_text=schema_text,
    )
    print(f"Schema '{saved.name}' saved (id={saved.id}).")
    return 0


def _list_queries(settings: Settings, args: argparse.Namespace) -> int:
    settings.validate_record_store_requirements()
    ensure_tables(settings.database_url)
    queries = list_queries(
        settings.database_url, user_id=settings.user_id, search=args.search
    )
    print("Saved queries:")
    if not queries:
        print("- (none)")
    for query in queries:
        print(f"- [{query.created_at.isoformat()}] {query.prompt}")
        print(f"  {query.sql_result}")
    return 0


def _list_schemas(settings: Settings, args: argparse.Namespace) -> int:
    settings.validate_record_store_requirements()
    ensure_tables(settings.database_url)
    schemas = list_schemas(
        settings.database_url, user_id=settings.user_id, search=args.search
    )
    print("Saved schemas:")
    if not schemas:
        print("- (none)")
    for schema in schemas:
        preview = schema.schema_sql
        if len(preview) > 300:
            preview = preview[:300] + "..."
        print(f"- [{schema.created_at.isoformat()}] {schema.name}")
        print(f"  {preview}")
    return 0


def _export(settings: Settings, args: argparse.Namespace) -> int:
    settings.validate_record_store_requirements()
    ensure_tables(settings.database_url)
    if args.kind == "queries":
        records = list_queries(
            settings.database_url, user_id=settings.user_id, search=args.search
        )
    else:
        records = list_schemas(
            settings.database_url, user_id=settings.user_id, search=args.search
        )
    path = export_records(records, args.kind, args.output_dir)
    print(f"Exported {len(records)} {args.kind} to {path}")
    return 0


def _healthcheck(settings: Settings, args: argparse.Namespace) -> int:
    settings.validate_record_store_requirements()
    result = check_record_store_health(settings.database_url)
    print("Record store healthcheck succeeded:")
    print(f"- database: {result.current_database}")
    print(f"- user: {result.current_user}")
    print(f"- server_version: {result.server_version}")
    return 0


_COMMANDS = {
    "config-check": _config_check,
    "providers": _providers,
    "use-provider": _use_provider,
    "set-key": _set_key,
    "generate-sql": _generate_sql,
    "insights": _insights,
    "save-schema": _save_schema,
    "list-queries": _list_queries,
    "list-schemas": _list_schemas,
    "export": _export,
    "healthcheck": _healthcheck,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings()
        configure_logging(log_level=settings.log_level, log_file=settings.log_file)
    except (ConfigError, ValueError) as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2

    command = _COMMANDS[args.command]
    try:
        return command(settings, args)
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2
    except UnsupportedProviderError as exc:
        print(f"Provider error:\n{exc}", file=sys.stderr)
        return 2
    except CredentialStoreError as exc:
        print(f"Credential store error:\n{exc}", file=sys.stderr)
        return 1
    except (PromptBuildError, SchemaFileError) as exc:
        print(f"Invalid input:\n{exc}", file=sys.stderr)
        return 1
    except ProviderError as exc:
        print(f"SQL generation failed:\n{exc}", file=sys.stderr)
        return 1
    except RecordStoreError as exc:
        print(f"Record store error:\n{exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
