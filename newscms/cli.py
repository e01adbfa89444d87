"""Command line entry point of the CMS service."""

import argparse
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from newscms import config, db
from newscms.server import serve
from newscms.utils import setup_signal_handler

logger = logging.getLogger(__name__)


def _run_serve(args: argparse.Namespace) -> int:
    logger.info("serve called")
    stop = setup_signal_handler()
    try:
        serve(stop)
    except (ConnectionError, RuntimeError, OSError) as exc:
        logger.error(exc)
    return 0


def _run_migrate(args: argparse.Namespace) -> int:
    logger.info("migration called")
    try:
        config.load()
    except config.ConfigError as exc:
        logger.error(exc)
        return 1
    try:
        db.migrate(args.uri, args.path)
    except (db.MigrationError, SQLAlchemyError, OSError) as exc:
        logger.error(exc)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser with the serve and migrate commands."""
    parser = argparse.ArgumentParser(
        prog="cms", description="New Portal Content Management System"
    )
    commands = parser.add_subparsers(dest="command")

    serve_cmd = commands.add_parser("serve", help="Serve serves the cms service")
    serve_cmd.set_defaults(func=_run_serve)

    migrate_cmd = commands.add_parser("migrate", help="Run db migration")
    migrate_cmd.add_argument("--path", default="/db/migrations", help="migrations file path")
    migrate_cmd.add_argument("--uri", default="", help="postgres uri")
    migrate_cmd.set_defaults(func=_run_migrate)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Load the configuration and run the chosen command; return the exit code."""
    logging.basicConfig(level=logging.DEBUG)
    parser = build_parser()
    try:
        config.load()
    except config.ConfigError as exc:
        logger.error(exc)
        return 1
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    return args.func(args)