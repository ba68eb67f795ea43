from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from floorimport.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportSettings, load_config
from floorimport.excel.template import write_template
from floorimport.logging.error_log import ErrorLogBuffer
from floorimport.logging.init import log_preview, log_summary, setup_logging
from floorimport.models.import_result import ImportResult
from floorimport.services.progress import CommitProgressBar
from floorimport.services.session import ImportSession
from floorimport.services.summary import render_commit_line, render_preview_line, render_row_status
from floorimport.store.snapshot import JsonSnapshotStore, SnapshotError, load_collection

"""CLI entrypoint.

    python -m floorimport.cli preview --kind products FILE
    python -m floorimport.cli commit  --kind reports  FILE
    python -m floorimport.cli template --kind reports OUT.xlsx

preview: parse + reconcile against the local snapshot and print per-row
status and the PREVIEW line. commit: the same, then write the valid rows
through the snapshot store (passing ``commit`` is the confirmation step) and
print the SUMMARY line.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

# kind -> snapshot collection
COLLECTIONS = {"products": "products", "reports": "reports"}
LOOKUP_COLLECTIONS = ("lines", "products", "employees")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; a failure only prints a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet import for products and production reports")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/import.yml)")
    sub = p.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("preview", "Parse and validate a file without writing anything"),
        ("commit", "Parse a file and save its valid rows"),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("--kind", choices=sorted(COLLECTIONS), required=True)
        sp.add_argument("file", type=Path)
    tp = sub.add_parser("template", help="Write an import template workbook")
    tp.add_argument("--kind", choices=sorted(COLLECTIONS), required=True)
    tp.add_argument("--locale", choices=("en", "ar"), default="en")
    tp.add_argument("output", type=Path)
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv("FLOORIMPORT_CONFIG")
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _lookups(directory: Path) -> dict[str, list[dict]]:
    return {name: load_collection(directory, name) for name in LOOKUP_COLLECTIONS}


def _print_preview(result: ImportResult, logger) -> None:
    for row in result.rows:
        if row.errors:
            logger.warning(render_row_status(row))
        else:
            logger.info(render_row_status(row))
    # log_preview が "PREVIEW " を付与するため除去
    log_preview(render_preview_line(result)[len("PREVIEW "):])


def _run_import(args: argparse.Namespace, cfg: ImportSettings, logger) -> int:
    directory = Path(cfg.snapshot_directory)
    error_log = ErrorLogBuffer(Path(cfg.error_log_directory))
    try:
        store = JsonSnapshotStore(directory, COLLECTIONS[args.kind])
        lookups = _lookups(directory)
    except SnapshotError as e:
        logger.error(f"snapshot: {e}")
        return EXIT_FATAL

    session = ImportSession(args.kind, number_policy=cfg.unparseable_numbers, error_log=error_log)
    result = session.parse(args.file, store.snapshot(), lookups)
    _print_preview(result, logger)

    try:
        if result.total_rows == 0:
            logger.warning(f"{args.file.name}: no data rows found")
            return EXIT_FATAL if args.command == "commit" else EXIT_SUCCESS_ALL
        if args.command == "preview":
            session.cancel()
            return EXIT_SUCCESS_ALL if result.error_count == 0 else EXIT_PARTIAL_FAILURE
        if not session.has_valid_rows:
            logger.error("nothing to commit: every row has errors")
            return EXIT_FATAL

        enabled = None if cfg.progress == "auto" else False
        with CommitProgressBar(result.valid_count, enabled=enabled) as bar:
            outcome = asyncio.run(session.commit(store.create, store.update, on_progress=bar))
        log_summary(render_commit_line(outcome)[len("SUMMARY "):])

        if outcome.batch_failed:
            return EXIT_FATAL
        if outcome.failed > 0 or result.error_count > 0:
            return EXIT_PARTIAL_FAILURE
        return EXIT_SUCCESS_ALL
    finally:
        path = error_log.flush()
        if path is not None:
            logger.info(f"error log: {path}")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む ([] はテストからの明示的な空引数)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    if args.command == "template":
        lookups: dict[str, list[dict]] = {}
        config_path = _config_path(args)
        if config_path.exists():
            try:
                lookups = _lookups(Path(load_config(config_path).snapshot_directory))
            except (ConfigError, SnapshotError) as e:
                logger.error(f"config: {e}")
                return EXIT_FATAL
        write_template(args.output, args.kind, lookups, locale=args.locale)
        logger.info(f"template written: {args.output}")
        return EXIT_SUCCESS_ALL

    try:
        cfg = load_config(_config_path(args))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"{args.command} {args.kind}: {args.file}")
    return _run_import(args, cfg, logger)

