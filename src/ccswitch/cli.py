# CLI interface for ccswitch
import argparse
import json
import sys
from pathlib import Path

from ccswitch import __version__
from ccswitch.config import configure_logging, get_data_file, get_host, get_port
from ccswitch.importer import SqlImportError, import_from_sql, preview_sql
from ccswitch.models import APP_IDS
from ccswitch.platforms import get_writers
from ccswitch.store import ConfigStore
from ccswitch.sync import apply_provider

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def _get_store(args: argparse.Namespace) -> ConfigStore:
    data_dir = getattr(args, "data_dir", None)
    return ConfigStore(get_data_file(Path(data_dir).expanduser() if data_dir else None))


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn.

    ABOUTME: Blocks until the server is stopped
    """
    import uvicorn

    from ccswitch.api import create_app

    host = args.host or get_host()
    port = args.port or get_port()
    store = _get_store(args)

    print(f"ccswitch serve v{__version__}")
    print(f"Data file: {store.path}")
    print(f"Listening on http://{host}:{port}")

    uvicorn.run(create_app(store=store), host=host, port=port, log_level="info")
    return EXIT_SUCCESS


def cmd_list(args: argparse.Namespace) -> int:
    """List an app's providers, marking the current one."""
    print(f"ccswitch list v{__version__}")
    print()

    try:
        store = _get_store(args)
        providers = store.list_providers(args.app)
        current = store.get_current(args.app)

        print(f"{args.app} providers in {store.path}:")
        print()
        for provider_id, provider in providers.items():
            marker = "*" if provider_id == current else " "
            print(f"  {marker} {provider.name}")
            print(f"      id: {provider_id}")
            print(f"      category: {provider.category}")
            if provider.website_url:
                print(f"      website: {provider.website_url}")

        print()
        print(f"Total: {len(providers)} provider(s)")
        return EXIT_SUCCESS

    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_switch(args: argparse.Namespace) -> int:
    """Make a provider current and write it into the app's config files.

    ABOUTME: An unknown id still becomes current, nothing is written (exit 1)
    """
    print(f"ccswitch switch v{__version__}")
    print()

    try:
        store = _get_store(args)
        provider = store.switch_provider(args.app, args.id)
        if provider is None:
            print(f"Warning: provider '{args.id}' not found, {args.app} config files left unchanged")
            return EXIT_PARTIAL

        report = apply_provider(args.app, provider, get_writers())
        print(f"Switched {args.app} to '{provider.name}'")
        for path in report.paths:
            print(f"  updated {path}")
        return EXIT_SUCCESS

    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_export(args: argparse.Namespace) -> int:
    """Write the whole aggregate as JSON to a file or stdout."""
    try:
        data = _get_store(args).export()
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        if args.output:
            Path(args.output).write_text(text, encoding="utf-8")
            print(f"Exported config to {args.output}")
        else:
            sys.stdout.write(text)
        return EXIT_SUCCESS

    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_import(args: argparse.Namespace) -> int:
    """Replace the aggregate with a previously exported JSON file."""
    print(f"ccswitch import v{__version__}")
    print()

    try:
        config = json.loads(Path(args.file).read_text(encoding="utf-8"))
        store = _get_store(args)
        store.import_config(config)
        print(f"Imported {args.file} into {store.path}")
        return EXIT_SUCCESS

    except FileNotFoundError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except (json.JSONDecodeError, ValueError) as e:
        print(f"Error: invalid config file: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_import_sql(args: argparse.Namespace) -> int:
    """Import (or with --preview, just count) rows from a SQL dump.

    ABOUTME: A real import replaces all providers, MCP servers and prompts
    """
    print(f"ccswitch import-sql v{__version__}")
    print()

    try:
        dump = Path(args.file).read_bytes()

        if args.preview:
            counts = preview_sql(dump)
            print(f"Preview of {args.file}:")
        else:
            store = _get_store(args)
            counts = import_from_sql(store, dump)
            print(f"Imported {args.file} into {store.path}:")

        print(f"  providers: {counts.providers}")
        print(f"  MCP servers: {counts.mcp_servers}")
        print(f"  prompts: {counts.prompts}")

        if counts.skipped:
            print()
            for table, skipped in sorted(counts.skipped.items()):
                print(f"  Warning: {skipped} {table} row(s) skipped")
            return EXIT_PARTIAL
        return EXIT_SUCCESS

    except FileNotFoundError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except SqlImportError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = argparse.ArgumentParser(
        prog="ccswitch",
        description="Switch API providers for Claude Code, Codex and Gemini CLI"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"ccswitch v{__version__}"
    )
    parser.add_argument(
        "--data-dir",
        help="Directory holding ccswitch-data.json (default: $DATA_DIR or ~/.cc-switch)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the local HTTP API"
    )
    serve_parser.add_argument(
        "--host",
        help="Bind address (default: $HOST or 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Port (default: $PORT or 3001)"
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List an app's providers"
    )
    list_parser.add_argument(
        "app",
        choices=APP_IDS,
        help="App to list providers for"
    )

    # switch command
    switch_parser = subparsers.add_parser(
        "switch",
        help="Switch an app to a provider"
    )
    switch_parser.add_argument(
        "app",
        choices=APP_IDS,
        help="App to switch"
    )
    switch_parser.add_argument(
        "id",
        help="Provider id"
    )

    # export command
    export_parser = subparsers.add_parser(
        "export",
        help="Export the whole config as JSON"
    )
    export_parser.add_argument(
        "--output", "-o",
        help="Output file (default: stdout)"
    )

    # import command
    import_parser = subparsers.add_parser(
        "import",
        help="Replace the whole config with an exported JSON file"
    )
    import_parser.add_argument(
        "file",
        help="JSON file to import"
    )

    # import-sql command
    import_sql_parser = subparsers.add_parser(
        "import-sql",
        help="Import providers, MCP servers and prompts from a SQL dump"
    )
    import_sql_parser.add_argument(
        "file",
        help="SQL dump file"
    )
    import_sql_parser.add_argument(
        "--preview",
        action="store_true",
        help="Only count INSERT statements, don't import"
    )

    # Parse args
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    # Dispatch to command
    if args.command == "serve":
        return cmd_serve(args)
    elif args.command == "list":
        return cmd_list(args)
    elif args.command == "switch":
        return cmd_switch(args)
    elif args.command == "export":
        return cmd_export(args)
    elif args.command == "import":
        return cmd_import(args)
    elif args.command == "import-sql":
        return cmd_import_sql(args)
    else:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
