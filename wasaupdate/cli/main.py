"""
Command line entrypoint for wasaupdate.

Usage::

    wasaupdate [--script PATH] [--dry | --current | --latest | --install] [-- command ...]
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from wasaupdate import __version__
from wasaupdate.cli.command_handlers import handle_dry, handle_init, handle_query, handle_update
from wasaupdate.cli.utils import Console, resolve_script_argument
from wasaupdate.config import load_config
from wasaupdate.core.context import UpdateContext
from wasaupdate.core.exceptions import WasaupdateError
from wasaupdate.core.installer import Installer
from wasaupdate.core.logging_utils import configure_logging
from wasaupdate.core.policy import ScriptPolicy
from wasaupdate.core.updater import Updater

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""

    parser = argparse.ArgumentParser(prog="wasaupdate", description="wasaupdate - A tool for updating stuff")
    parser.add_argument("--version", action="version", version=f"wasaupdate {__version__}")
    parser.add_argument("--script", type=Path, default=None, help="Path to the update script file")
    parser.add_argument("--config", default=None, help="Configuration file (default: wasaupdate.yaml)")
    parser.add_argument("--current", action="store_true", help="Print the current version")
    parser.add_argument("--latest", action="store_true", help="Print the latest version")
    parser.add_argument(
        "--install",
        action="store_true",
        help="Print the location for installing the latest version",
    )
    parser.add_argument(
        "--dry",
        action="store_true",
        help="Print current, latest and install location without updating",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Initialize a placeholder update script if it does not exist",
    )
    parser.add_argument(
        "--background",
        action="store_true",
        help="Run the command after update in the background",
    )
    parser.add_argument("--json", action="store_true", help="Emit results as JSON")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument(
        "run_after",
        nargs="*",
        help="Command to run after update (use -- before options of the command)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entrypoint for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console(quiet=args.quiet, as_json=args.json)

    config = load_config(Path.cwd(), config_file=args.config)
    active_level = configure_logging(
        args.log_level or config.logging.level,
        log_file=config.logging.path,
        reset_on_start=config.logging.reset_on_start,
    )
    logger.info("Log level set to %s", active_level)

    script_path = resolve_script_argument(args.script, config)
    if args.init:
        return handle_init(script_path, console)

    if not script_path.is_file():
        console.error(f"The update script file '{script_path}' does not exist (create one with --init).")
        return 1

    context = UpdateContext.from_config(config, progress=console.progress)
    try:
        policy = ScriptPolicy.load(script_path, context=context)
        if args.dry:
            return handle_dry(Updater(policy, Installer(context)), console)
        if args.current or args.latest or args.install:
            return handle_query(policy, console, current=args.current, latest=args.latest, install=args.install)
        return handle_update(
            Updater(policy, Installer(context)),
            console,
            run_after=args.run_after or config.post_update.command,
            background=args.background or config.post_update.background,
        )
    except WasaupdateError as e:
        logger.debug("Run failed: %s", e.to_dict())
        console.error(e.message)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
