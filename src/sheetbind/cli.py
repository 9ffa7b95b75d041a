"""Command-line interface for SheetBind."""

import argparse
import json
import logging
import sys
from pathlib import Path

import uvicorn

from .config import settings
from .errors import BindingError


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SheetBind - Bind spreadsheet tables to optimization models"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Auth command
    subparsers.add_parser("auth", help="Authenticate with Google Sheets API")

    # Workbook commands
    tables_parser = subparsers.add_parser("tables", help="Print the tables detected in a workbook")
    _add_workbook_arguments(tables_parser)

    mapping_parser = subparsers.add_parser("mapping", help="Print the input mapping of an outline")
    _add_workbook_arguments(mapping_parser)
    _add_outline_argument(mapping_parser)

    extract_parser = subparsers.add_parser("extract", help="Print the input values of an outline")
    _add_workbook_arguments(extract_parser)
    _add_outline_argument(extract_parser)

    inject_parser = subparsers.add_parser("inject", help="Write solver results into a workbook")
    _add_workbook_arguments(inject_parser)
    _add_outline_argument(inject_parser)
    inject_group = inject_parser.add_mutually_exclusive_group(required=True)
    inject_group.add_argument("--results", type=Path, help="JSON file holding tensor results")
    inject_group.add_argument(
        "--reset", action="store_true", help="Clear mapped variable values instead"
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "auth":
        run_auth()
    elif args.command in ("tables", "mapping", "extract", "inject"):
        try:
            run_workbook_command(args)
        except BindingError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


def _add_workbook_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--csv",
        action="append",
        metavar="SHEET=PATH",
        help="CSV file holding one sheet (repeatable)",
    )
    source.add_argument("--spreadsheet", "-s", help="Google Sheets spreadsheet ID")


def _add_outline_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--outline", type=Path, required=True, help="JSON file holding the outline")


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "sheetbind.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def run_auth():
    """Run the Google authentication flow."""
    from .sheets.client import load_credentials

    print("Authenticating with Google Sheets API...")
    try:
        load_credentials()
        print("Authentication successful!")
        print("Token saved. You can now use SheetBind with Google Sheets.")
    except Exception as e:
        print(f"Authentication failed: {e}")
        sys.exit(1)


def run_workbook_command(args: argparse.Namespace) -> None:
    """Run one of the tables, mapping, extract or inject commands."""
    from .inputs import extract_input_values
    from .mapping import compute_input_mapping
    from .outline import Outline, TensorResult
    from .results import populate_results, reset_results
    from .tables import identify_tables

    csv_paths = _parse_csv_arguments(args.csv) if args.csv else None
    spreadsheet = _open_spreadsheet(args.spreadsheet, csv_paths)

    tables = identify_tables(spreadsheet)
    if args.command == "tables":
        _print_json({"tables": [t.model_dump(mode="json") for t in tables]})
        return

    outline = Outline.model_validate_json(args.outline.read_text())
    mapping = compute_input_mapping(tables, outline)
    if args.command == "mapping":
        _print_json(mapping.model_dump(mode="json"))
    elif args.command == "extract":
        values = extract_input_values(mapping, spreadsheet)
        _print_json(values.model_dump(mode="json", by_alias=True))
    else:
        if args.reset:
            patches = reset_results(mapping, spreadsheet)
        else:
            raw = json.loads(args.results.read_text())
            results = [TensorResult.model_validate(r) for r in raw]
            patches = populate_results(results, mapping, spreadsheet)
        if csv_paths is not None:
            for sheet, path in csv_paths.items():
                path.write_text(spreadsheet.to_csv(sheet))
        print(f"Applied {len(patches)} patch(es)")


def _parse_csv_arguments(values: list[str]) -> dict[str, Path]:
    paths: dict[str, Path] = {}
    for value in values:
        sheet, sep, path = value.partition("=")
        if not sep or not sheet or not path:
            raise SystemExit(f"Invalid --csv argument {value!r}, expected SHEET=PATH")
        paths[sheet] = Path(path)
    return paths


def _open_spreadsheet(spreadsheet_id, csv_paths):
    if csv_paths is not None:
        from .sheets import InMemorySpreadsheet

        return InMemorySpreadsheet.for_csvs(
            {sheet: path.read_text() for sheet, path in csv_paths.items()}
        )

    from .sheets import GoogleSheetsSpreadsheet

    return GoogleSheetsSpreadsheet(spreadsheet_id)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


if __name__ == "__main__":
    main()
