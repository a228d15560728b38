"""aliaskit CLI: prints bash code declaring aliases and their completions.

Typical ~/.bashrc usage:

    eval "$(aliaskit init)"

which declares the aliases listed in the configuration file, and the
`add-source-path`, `make-autocompleted-alias` (and short name) shell
functions to add more from the shell.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shlex
import sys
from pathlib import Path

import shtab

from .ansi import GREEN, RED, YELLOW, colorize, should_colorize
from .config import Configuration
from .config_loader import ConfigLoader
from .constants import DEFAULT_SCAN_TIMEOUT, DEFAULT_SHORT_NAME, PROGRAM_NAME
from .logging_setup import get_logger, init_logger
from .models import AliaskitError, ExitCode
from .proxy import make_autocompleted_alias
from .render import render_bash
from .session import Session, registry_from_config
from .source_paths import add_source_path
from .validation import validate_config

__all__ = ["get_parser", "main", "run"]


def get_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(prog=PROGRAM_NAME, description="Shell alias and completion proxy generator", allow_abbrev=False)
    parser.add_argument(
        "--debug",
        help="Enable debug mode and log to a file",
        metavar="filename",
    ).complete = shtab.FILE  # type: ignore[attr-defined]
    parser.add_argument(
        "--config",
        help="Use a different configuration file or directory",
        metavar="filename",
        type=Path,
    ).complete = shtab.FILE  # type: ignore[attr-defined]
    shtab.add_argument_to(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    init = subparsers.add_parser("init", help="Print the shell hooks and the configured aliases")
    init.add_argument("--no-hooks", action="store_true", help="Only print the configured aliases")

    asp = subparsers.add_parser("add-source-path", help="Alias every script under a directory to sourcing it")
    asp.add_argument("-a", dest="include_hidden", action="store_true", help="Include hidden files and directories")
    asp.add_argument("-e", dest="keep_extension", action="store_true", help="Keep extensions in alias names")
    asp.add_argument("--timeout", type=float, help="Directory scan limit, in seconds")
    asp.add_argument("directory", help="Directory to scan").complete = shtab.DIRECTORY  # type: ignore[attr-defined]

    mca = subparsers.add_parser("make-autocompleted-alias", help="Define an alias completing like a command")
    mca.add_argument("-q", dest="quiet", action="store_true", help="Do not warn when the command has no completion")
    mode = mca.add_mutually_exclusive_group()
    mode.add_argument("-f", dest="source_file", metavar="file", help="Make the alias source this file").complete = shtab.FILE  # type: ignore[attr-defined]
    mode.add_argument("-o", dest="override", metavar="string", help="Make the alias run this string")
    mca.add_argument("alias", help="Alias name")
    mca.add_argument("reference", nargs=argparse.REMAINDER, metavar="command [args...]", help="Command whose completion is borrowed")

    subparsers.add_parser("validate", help="Validate the configuration file")
    return parser


def _load_config(args: argparse.Namespace) -> Configuration:
    log = get_logger("config")
    return Configuration(ConfigLoader(log).load(args.config), logger=log)


def _config_is_valid(config: Configuration, log: logging.Logger) -> bool:
    report = validate_config(config)
    for warning in report.warnings:
        log.warning(warning)
    for error in report.errors:
        log.error(error)
    return report.ok


async def _run_init(args: argparse.Namespace, config: Configuration, title: str) -> ExitCode:
    log = get_logger("init")
    if not _config_is_valid(config, log):
        return ExitCode.CONFIG_ERROR

    session = Session(log=log)
    await session.apply_config(config, registry_from_config(config))
    settings = config.sub("aliaskit")
    print(
        session.render(
            title,
            hooks=not args.no_hooks,
            short_name=settings.get_str("short_name", DEFAULT_SHORT_NAME),
            executable=settings.get_str("executable", PROGRAM_NAME),
        ),
        end="",
    )
    return ExitCode.SUCCESS


async def _run_add_source_path(args: argparse.Namespace, config: Configuration, title: str) -> ExitCode:
    timeout = args.timeout
    if timeout is None:
        timeout = config.sub("aliaskit").get_float("scan_timeout", DEFAULT_SCAN_TIMEOUT)
    aliases = await add_source_path(
        args.directory,
        include_hidden=args.include_hidden,
        keep_extension=args.keep_extension,
        timeout=timeout,
    )
    print(render_bash(aliases, title), end="")
    return ExitCode.SUCCESS


async def _run_make_autocompleted_alias(args: argparse.Namespace, config: Configuration, title: str) -> ExitCode:
    log = get_logger("proxy")
    if not args.reference:
        log.error("Missing the command to borrow completion from")
        return ExitCode.USAGE_ERROR
    if not _config_is_valid(config, log):
        return ExitCode.CONFIG_ERROR
    try:
        result = await make_autocompleted_alias(
            args.alias,
            args.reference,
            registry_from_config(config),
            source_file=args.source_file,
            override=args.override,
            quiet=args.quiet,
            log=log,
        )
    except ValueError as e:
        log.error("%s", e)
        return ExitCode.USAGE_ERROR
    print(render_bash(result.declarations, title), end="")
    return result.exit_code


def _run_validate(config: Configuration) -> ExitCode:
    report = validate_config(config)
    colors = should_colorize(sys.stdout)
    for error in report.errors:
        print(colorize(f"ERROR: {error}", RED) if colors else f"ERROR: {error}")
    for warning in report.warnings:
        print(colorize(f"WARNING: {warning}", YELLOW) if colors else f"WARNING: {warning}")
    if not report.ok:
        print(f"Found {len(report.errors)} error(s) and {len(report.warnings)} warning(s)")
        return ExitCode.CONFIG_ERROR
    message = "Configuration is valid!" if not report.warnings else f"Found {len(report.warnings)} warning(s)"
    print(colorize(message, GREEN) if colors and not report.warnings else message)
    return ExitCode.SUCCESS


async def run_command(args: argparse.Namespace, title: str = PROGRAM_NAME) -> ExitCode:
    """Run the command selected on the command line."""
    config = _load_config(args)
    if args.command == "init":
        return await _run_init(args, config, title)
    if args.command == "add-source-path":
        return await _run_add_source_path(args, config, title)
    if args.command == "make-autocompleted-alias":
        return await _run_make_autocompleted_alias(args, config, title)
    if args.command == "validate":
        return _run_validate(config)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the exit code."""
    parser = get_parser()
    args = parser.parse_args(argv)
    if args.debug:
        init_logger(filename=args.debug, force_debug=True)
    else:
        init_logger()
    log = get_logger("startup")

    if args.command is None:
        parser.print_usage(sys.stderr)
        return ExitCode.USAGE_ERROR

    title = shlex.join([PROGRAM_NAME, *(sys.argv[1:] if argv is None else argv)])
    try:
        return asyncio.run(run_command(args, title))
    except KeyboardInterrupt:
        return ExitCode.USAGE_ERROR
    except AliaskitError:
        log.critical("Command failed.")
        return ExitCode.CONFIG_ERROR


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
