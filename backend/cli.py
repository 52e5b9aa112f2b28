"""Opportunity Engine CLI.
Maps argparse commands onto the ingestion runner and the database.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, Sequence

from config import Config, apply_env_credentials, load_config
from database import Database
from ingest.adapters import build_adapters
from ingest.base import Source, Status
from ingest.http import HttpClient
from ingest.runner import ALL_SOURCES, EmptyResultError, IngestionRunner, PersistenceError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_EMPTY = 1
EXIT_ERROR = 2


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser."""
    parser = argparse.ArgumentParser(prog="opportunity-engine", description="Opportunity ingestion CLI")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    parser.add_argument("--db", help="Override database_path from config")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Pull, score and store opportunities")
    ingest.add_argument(
        "--source",
        default=ALL_SOURCES,
        choices=[ALL_SOURCES] + [s.value for s in Source],
    )
    ingest.add_argument("--limit", type=_positive_int, help="Per-source item limit")

    listing = subparsers.add_parser("list", help="List stored opportunities")
    listing.add_argument("--status", choices=[s.value for s in Status])
    listing.add_argument("--source", choices=[s.value for s in Source])
    listing.add_argument("--min-score", type=float, default=0)
    listing.add_argument("--max-score", type=float, default=100)
    listing.add_argument("--sort-by", choices=["score", "date", "source"], default="score")
    listing.add_argument("--limit", type=_positive_int, default=100)
    listing.add_argument("--offset", type=int, default=0)

    set_status = subparsers.add_parser("set-status", help="Change an opportunity's status")
    set_status.add_argument("id", type=int)
    set_status.add_argument("status", choices=[s.value for s in Status])

    runs = subparsers.add_parser("runs", help="Show recent run outcomes")
    runs.add_argument("--source", choices=[s.value for s in Source])
    runs.add_argument("--limit", type=_positive_int, default=20)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    db = Database(args.db or config.database_path)
    try:
        if args.command == "ingest":
            return _run_ingest_command(build_runner(config, db), args.source, args.limit or config.runner.default_limit)
        if args.command == "list":
            return _run_list_command(db, args)
        if args.command == "set-status":
            return _run_set_status_command(db, args)
        if args.command == "runs":
            return _run_runs_command(db, args)
    finally:
        db.close()
    parser.error(f"Unsupported command: {args.command}")
    return EXIT_ERROR


def _load_config(path: str) -> Config:
    if os.path.exists(path):
        return load_config(path)
    return apply_env_credentials(Config())


def build_runner(config: Config, db: Database) -> IngestionRunner:
    """Wire adapters, HTTP client and storage into a runner."""
    http = HttpClient(user_agent=config.http.user_agent, timeout=config.http.timeout)
    adapters = build_adapters(http, config.credentials)
    return IngestionRunner(
        adapters,
        db,
        timeout=config.runner.source_timeout,
        max_workers=config.runner.max_workers,
    )


def _run_ingest_command(runner: IngestionRunner, source: str, limit: int) -> int:
    """Run one ingestion pass and print a success, empty or error response."""
    try:
        report = runner.run(source, limit)
    except EmptyResultError as e:
        _print_json({"error": str(e)}, stream=sys.stderr)
        return EXIT_EMPTY
    except PersistenceError as e:
        _print_json({"error": str(e)}, stream=sys.stderr)
        return EXIT_ERROR
    _print_json({
        "success": True,
        "sources": report.sources,
        "count": report.count,
        "outcomes": [asdict(outcome) for outcome in report.outcomes],
        "opportunities": report.opportunities,
    })
    return EXIT_OK


def _run_list_command(db: Database, args: argparse.Namespace) -> int:
    filters = dict(
        status=args.status,
        source=args.source,
        min_score=args.min_score,
        max_score=args.max_score,
    )
    opportunities = db.list_opportunities(
        sort_by=args.sort_by, limit=args.limit, offset=args.offset, **filters
    )
    _print_json({
        "success": True,
        "opportunities": opportunities,
        "total": db.count_opportunities(**filters),
        "limit": args.limit,
        "offset": args.offset,
    })
    return EXIT_OK


def _run_set_status_command(db: Database, args: argparse.Namespace) -> int:
    try:
        opportunity = db.update_status(args.id, args.status)
    except LookupError as e:
        _print_json({"error": str(e)}, stream=sys.stderr)
        return EXIT_EMPTY
    _print_json({"success": True, "opportunity": opportunity})
    return EXIT_OK


def _run_runs_command(db: Database, args: argparse.Namespace) -> int:
    _print_json({"success": True, "runs": db.list_run_outcomes(args.source, args.limit)})
    return EXIT_OK


def _print_json(payload: Any, stream=None) -> None:
    print(json.dumps(payload, indent=2, default=str), file=stream or sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
