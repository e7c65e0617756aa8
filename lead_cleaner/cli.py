"""Command line interface for cleaning lead exports."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import (
    ConfigurationError,
    chunk_size_from_config,
    export_settings_from_config,
    filter_options_from_config,
    load_configuration,
)
from .exceptions import ExportError, InputParseError
from .ingestion import UnsupportedFileTypeError, export_rows, load_rows, render_export, write_export
from .models import EXPORT_FORMATS, DateRange, ExportSettings, FilterOptions
from .phone import describe_phone_number
from .pipeline import LeadFilterPipeline, parse_date_bound

LOGGER = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text!r}") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return value


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Filter Brazilian lead exports and export cleaned phone numbers",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    clean = subparsers.add_parser("clean", help="Filter a lead export and write the cleaned result")
    clean.add_argument("input", help="Path to the lead export (CSV or XLSX)")
    clean.add_argument("output", help="Path where the export should be written")
    clean.add_argument("--config", help="Path to a filter/export profile (YAML or JSON)")
    clean.add_argument(
        "--format",
        dest="export_format",
        choices=EXPORT_FORMATS,
        default=None,
        help="Export layout: omnichat, zenvia, txt (plain list) or rows (filtered table)",
    )
    clean.add_argument("--remove-duplicates", action="store_true", default=None, help="Drop repeated numbers")
    clean.add_argument("--format-numbers", action="store_true", default=None, help="Normalise numbers to 55+DDD+number")
    clean.add_argument("--remove-invalid", action="store_true", default=None, help="Drop invalid Brazilian numbers")
    clean.add_argument("--remove-empty", action="store_true", default=None, help="Drop rows without any phone")
    clean.add_argument(
        "--date-from",
        default=None,
        help="Keep conversions on or after this date (YYYY-MM-DD; DD/MM/YYYY also accepted)",
    )
    clean.add_argument(
        "--date-to",
        default=None,
        help="Keep conversions on or before this date (YYYY-MM-DD; DD/MM/YYYY also accepted)",
    )
    clean.add_argument("--regex", default=None, help="Identifier filter; '|' separates alternatives")
    clean.add_argument("--sms-text", default=None, help="SMS body for Zenvia exports (max 160 characters)")
    clean.add_argument("--with-names", action="store_true", default=None, help="Add the lead's first name column")
    clean.add_argument("--placeholder-name", default=None, help="Name used when a lead has none")
    clean.add_argument("--encoding", default=None, help="Export encoding (utf-8, utf-8-sig, cp1252, ...)")
    clean.add_argument("--chunk-size", type=_positive_int, default=None, help="Rows processed per progress step")

    inspect = subparsers.add_parser("inspect", help="Show how individual numbers are cleaned and validated")
    inspect.add_argument("numbers", nargs="+", help="Phone numbers to inspect")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _date_bound(text: Optional[str], *, end: bool = False):
    if text is None:
        return None
    try:
        return parse_date_bound(text, end=end)
    except InputParseError as exc:
        LOGGER.error("%s; ignoring it", exc)
        return None


def _filter_options(args: argparse.Namespace, config: Dict[str, Any]) -> FilterOptions:
    options = filter_options_from_config(config)
    flags = {
        flag: True
        for flag in ("remove_duplicates", "format_numbers", "remove_invalid", "remove_empty")
        if getattr(args, flag)
    }
    if flags:
        options = options.updated(**flags)

    start = _date_bound(args.date_from)
    end = _date_bound(args.date_to, end=True)
    if start is not None or end is not None:
        options = options.updated(
            date_range=DateRange(
                start=start if start is not None else options.date_range.start,
                end=end if end is not None else options.date_range.end,
            )
        )
    if args.regex is not None:
        options = options.updated(regex_filter=args.regex)
    return options


def _export_settings(args: argparse.Namespace, config: Dict[str, Any]) -> ExportSettings:
    settings = export_settings_from_config(config)
    overrides = {
        "format": args.export_format,
        "sms_text": args.sms_text,
        "include_names": args.with_names,
        "placeholder_name": args.placeholder_name,
        "encoding": args.encoding,
    }
    return ExportSettings(
        **{
            key: value if value is not None else getattr(settings, key)
            for key, value in overrides.items()
        }
    )


def _log_progress(processed: int, total: int) -> None:
    LOGGER.debug("Progress %s/%s", processed, total)


def run_clean(args: argparse.Namespace) -> int:
    config = load_configuration(args.config) if args.config else {}
    options = _filter_options(args, config)
    settings = _export_settings(args, config)
    chunk_size = args.chunk_size if args.chunk_size is not None else chunk_size_from_config(config)

    parsed = load_rows(args.input)
    pipeline = LeadFilterPipeline(chunk_size=chunk_size, progress_callback=_log_progress)
    result = pipeline.apply(parsed.rows, options)
    for error in result.errors:
        LOGGER.error("Filter skipped: %s", error)

    if settings.format == "rows":
        export_rows(result.rows, args.output, headers=parsed.headers)
    else:
        text = render_export(result.export_records, settings)
        write_export(args.output, text, encoding=settings.encoding)

    stats = result.stats
    LOGGER.info(
        "Kept %s of %s rows; exported %s numbers", stats.filtered_records, stats.total_records, len(result.export_records)
    )
    LOGGER.info("Output written to %s", Path(args.output).resolve())
    return 0


def run_inspect(args: argparse.Namespace) -> int:
    for number in args.numbers:
        diagnosis = describe_phone_number(number)
        print(
            "\t".join(
                [
                    diagnosis.raw,
                    diagnosis.formatted or "-",
                    diagnosis.display or "-",
                    diagnosis.state or "-",
                    "valid" if diagnosis.is_valid else "invalid",
                    diagnosis.issue.label,
                ]
            )
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    if args.command == "inspect":
        return run_inspect(args)

    try:
        return run_clean(args)
    except (ConfigurationError, InputParseError, ExportError, UnsupportedFileTypeError, FileNotFoundError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
