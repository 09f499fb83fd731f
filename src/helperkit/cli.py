"""
Command-line interface for helperkit.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

from helperkit import __version__
from helperkit.convert import to_base
from helperkit.core.errors import HelperError
from helperkit.core.settings import HelperSettings, configure_logging, load_settings
from helperkit.serialization import HelperJSONEncoder
from helperkit.tables import merge_tables, remove_duplicates, set_columns_order, to_csv

logger = logging.getLogger(__name__)

_HANDLED_ERRORS = (HelperError, OSError, ValueError, KeyError)


def _load_table(path: str) -> pd.DataFrame:
    """Load a CSV file or a JSON list of records."""
    if Path(path).suffix.lower() == ".json":
        with open(path, encoding="utf-8") as f:
            return pd.DataFrame(json.load(f))
    return pd.read_csv(path)


def _emit_table(df: pd.DataFrame, output: str | None, settings: HelperSettings) -> None:
    """Write ``df`` to ``output`` (CSV or JSON by suffix) or to stdout as CSV."""
    if output and Path(output).suffix.lower() == ".json":
        with open(output, "w", encoding="utf-8") as f:
            json.dump(
                df.to_dict("records"),
                f,
                indent=settings.json_indent,
                cls=HelperJSONEncoder,
            )
        return
    text = to_csv(df, settings.csv_delimiter)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")


def _split_columns(value: str | None) -> list[str]:
    return [c.strip() for c in value.split(",") if c.strip()] if value else []


def cmd_table_dedupe(args) -> int:
    """Drop rows whose key columns repeat an earlier row."""
    try:
        df = _load_table(args.input)
        result = remove_duplicates(df, *_split_columns(args.columns))
        logger.info("Removed %d duplicate rows", len(df) - len(result))
        _emit_table(result, args.output, args.settings)
        return 0
    except _HANDLED_ERRORS as e:
        print(f"Dedupe failed: {e}", file=sys.stderr)
        return 1


def cmd_table_merge(args) -> int:
    """Concatenate tables that share a schema."""
    try:
        result = merge_tables(_load_table(path) for path in args.inputs)
        _emit_table(result, args.output, args.settings)
        return 0
    except _HANDLED_ERRORS as e:
        print(f"Merge failed: {e}", file=sys.stderr)
        return 1


def cmd_table_csv(args) -> int:
    """Print a table as delimited text, optionally moving columns to the front."""
    try:
        df = _load_table(args.input)
        columns = _split_columns(args.columns)
        if columns:
            df = set_columns_order(df, columns)
        delimiter = args.delimiter or args.settings.csv_delimiter
        sys.stdout.write(to_csv(df, delimiter) + "\n")
        return 0
    except _HANDLED_ERRORS as e:
        print(f"CSV export failed: {e}", file=sys.stderr)
        return 1


def cmd_convert_base(args) -> int:
    """Print NUMBER written in BASE."""
    result = to_base(args.number, args.base)
    if not result:
        print(f"Base must be between 2 and 36, got {args.base}", file=sys.stderr)
        return 1
    print(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``helperkit`` command."""
    parser = argparse.ArgumentParser(
        prog="helperkit", description="helperkit - table and conversion utilities"
    )
    parser.add_argument("--version", action="version", version=f"helperkit {__version__}")
    parser.add_argument("--config", help="Settings file (YAML or JSON)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True, help="Available commands")

    # Table commands
    table_parser = subparsers.add_parser("table", help="CSV/JSON table operations")
    table_sub = table_parser.add_subparsers(dest="table_cmd", required=True)

    dedupe_parser = table_sub.add_parser("dedupe", help="Remove duplicate rows")
    dedupe_parser.add_argument("input", help="Input CSV or JSON file")
    dedupe_parser.add_argument("--columns", help="Comma-separated key columns (default: all)")
    dedupe_parser.add_argument("-o", "--output", help="Output file (.csv or .json)")
    dedupe_parser.set_defaults(func=cmd_table_dedupe)

    merge_parser = table_sub.add_parser("merge", help="Merge tables with the same schema")
    merge_parser.add_argument("inputs", nargs="+", help="Input CSV or JSON files")
    merge_parser.add_argument("-o", "--output", help="Output file (.csv or .json)")
    merge_parser.set_defaults(func=cmd_table_merge)

    csv_parser = table_sub.add_parser("csv", help="Print a table as delimited text")
    csv_parser.add_argument("input", help="Input CSV or JSON file")
    csv_parser.add_argument("--delimiter", help="Field delimiter (default from settings)")
    csv_parser.add_argument("--columns", help="Comma-separated columns to move to the front")
    csv_parser.set_defaults(func=cmd_table_csv)

    # Convert commands
    convert_parser = subparsers.add_parser("convert", help="Value conversions")
    convert_sub = convert_parser.add_subparsers(dest="convert_cmd", required=True)

    base_parser = convert_sub.add_parser("base", help="Write an integer in base 2-36")
    base_parser.add_argument("number", type=int, help="Integer to convert")
    base_parser.add_argument("base", type=int, help="Target base (2-36)")
    base_parser.set_defaults(func=cmd_convert_base)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.settings = load_settings(args.config)
    except (HelperError, OSError) as e:
        print(f"Cannot load settings: {e}", file=sys.stderr)
        sys.exit(1)
    configure_logging(args.log_level or args.settings.log_level)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
