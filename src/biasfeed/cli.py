"""CLI for biasfeed news deduplication."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from biasfeed.config import create_from_config, get_default_config_path, load_config
from biasfeed.errors import BiasFeedError

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["dedupe", "serve"]
    config: Path
    dry_run: bool = False
    threshold: float | None = Field(default=None, gt=0.0, lt=1.0)
    log: bool = False
    log_dir: str | None = None
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


async def run_dedupe(args: CLIArgs) -> int:
    """Run one deduplication pass and print the response body.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    try:
        config = load_config(args.config)
        deduplicator, run_logger = create_from_config(
            config,
            dry_run_override=True if args.dry_run else None,
            threshold_override=args.threshold,
            log_override=True if args.log else None,
            log_dir_override=args.log_dir,
        )
    except ValueError as e:
        logger.error(f"Invalid config {args.config}: {e}")
        return 1

    logger.info(f"Config: {args.config}")
    try:
        report = await deduplicator.run()
    except BiasFeedError as e:
        logger.error(f"Deduplication failed: {e}")
        return 1

    for purge in report.purges:
        status = "FAILED" if purge.failed else ("would delete" if purge.dry_run else "deleted")
        logger.info(f"  [{status}] {purge.heading}")
        logger.info(f"     {purge.handle}")

    logger.info("\n--- Summary ---")
    logger.info(f"Items loaded: {report.loaded_count}")
    logger.info(f"Pairs compared: {report.comparisons}")
    logger.info(f"Duplicates found: {report.matches}")
    logger.info(f"Remaining in working set: {report.surviving_count}")

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")

    print(json.dumps(report.to_response()))
    return 1 if report.failures else 0


def run_serve(args: CLIArgs) -> int:
    """Serve the HTTP endpoints with Flask's development server."""
    from biasfeed.api import create_app

    app = create_app(load_config(args.config))
    app.run(host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Remove near-duplicate cached news items.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    dedupe_parser = subparsers.add_parser("dedupe", help="Run one deduplication pass")
    dedupe_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Report what would be deleted without deleting anything",
    )
    dedupe_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Heading similarity a pair must exceed to count as duplicate",
    )
    dedupe_parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Write a JSON run log",
    )
    dedupe_parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for run logs (default: from config)",
    )

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP endpoints")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args(argv)
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            config=config_path,
            dry_run=getattr(ns, "dry_run", False),
            threshold=getattr(ns, "threshold", None),
            log=getattr(ns, "log", False),
            log_dir=getattr(ns, "log_dir", None),
            host=getattr(ns, "host", "127.0.0.1"),
            port=getattr(ns, "port", 8000),
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if args.command == "serve":
            code = run_serve(args)
        else:
            code = asyncio.run(run_dedupe(args))
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
