"""Command line entry point (``stall`` / ``python -m stall``).

Usage:
  stall init [STALL] [--dry-run]
  stall status [-s STALL]
  stall add FILE... [-s STALL] [--rename NAME] [--into DIR] [-c] [--dry-run]
  stall rm FILE... [-s STALL] [-d] [--remote-naming] [--dry-run]
  stall mv FROM TO [-s STALL] [-m] [-f] [--dry-run]
  stall collect [FILE...] [-s STALL] [-f] [--dry-run]
  stall distribute [FILE...] [-s STALL] [-f] [--dry-run]

STALL may be a stall file or a directory holding one (``.stall`` by
default, see the ``stall.file_name`` preference).
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from stall import __version__, commands, metrics
from stall.commands import CommandResult, CommonOptions
from stall.config import get_config, resolve_stall_path
from stall.errors import StallError, map_exception
from stall.events import CommandFailed, emit
from stall.logs import configure_logging
from stall.registry import Stall

log = logging.getLogger(__name__)


def _common_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("--config", help=argparse.SUPPRESS)
    p.add_argument(
        "-o",
        "--short-names",
        action="store_true",
        help="Shorten filenames by omitting path prefixes.",
    )
    p.add_argument(
        "--error",
        dest="promote_warnings_to_errors",
        action="store_true",
        help="Promote any warnings into errors and abort.",
    )
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true",
        help="Provide more detailed messages.",
    )
    verbosity.add_argument(
        "-q", "--quiet", "--silent", action="store_true",
        help="Silence all non-error program output.",
    )
    p.add_argument("--ztrace", dest="trace", action="store_true",
                   help=argparse.SUPPRESS)
    return p


def _add_stall_opt(p: argparse.ArgumentParser) -> None:
    p.add_argument("-s", "--stall", help="The stall file or directory.")


def _add_dry_run(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Print intended operations instead of running them.",
    )


def build_parser() -> argparse.ArgumentParser:
    common = _common_parser()
    parser = argparse.ArgumentParser(
        prog="stall",
        description="A simple local configuration management utility.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser(
        "init", parents=[common],
        help="Initialize a stall directory by generating a stall file.",
    )
    p.add_argument("stall", nargs="?", help="The stall file to create.")
    _add_dry_run(p)

    p = sub.add_parser(
        "status", parents=[common], help="Print the status of stalled files."
    )
    _add_stall_opt(p)

    p = sub.add_parser("add", parents=[common], help="Add files to a stall.")
    _add_stall_opt(p)
    p.add_argument("files", nargs="+", help="The files to add to the stall.")
    p.add_argument(
        "--rename",
        help="Rename the file within the stall (single file only).",
    )
    p.add_argument("--into", help="Add stall files to a subdirectory.")
    p.add_argument(
        "-c", "--collect", action="store_true",
        help="Immediately collect the added files.",
    )
    _add_dry_run(p)

    p = sub.add_parser("rm", parents=[common], help="Remove files from a stall.")
    _add_stall_opt(p)
    p.add_argument("files", nargs="+", help="The files to remove.")
    p.add_argument(
        "-d", "--delete", action="store_true",
        help="Delete the stalled file copy.",
    )
    p.add_argument(
        "--remote-naming", action="store_true",
        help="Select files by their remote paths.",
    )
    _add_dry_run(p)

    p = sub.add_parser(
        "mv", parents=[common], help="Rename a file in a stall."
    )
    _add_stall_opt(p)
    p.add_argument("source", metavar="FROM")
    p.add_argument("target", metavar="TO")
    p.add_argument(
        "-m", "--move", dest="move_file", action="store_true",
        help="Move the stalled file copy.",
    )
    p.add_argument(
        "-f", "--force", action="store_true",
        help="Force the move even if files exist.",
    )
    _add_dry_run(p)

    for name, text in (
        ("collect", "Copy files into the stall from their remote locations."),
        ("distribute", "Copy files from the stall to their remote locations."),
    ):
        p = sub.add_parser(name, parents=[common], help=text)
        _add_stall_opt(p)
        p.add_argument(
            "files", nargs="*", help="Specific files. Defaults to all files."
        )
        p.add_argument(
            "-f", "--force", action="store_true",
            help="Force copy even if files are unmodified.",
        )
        _add_dry_run(p)
    return parser


def _dispatch(
    args: argparse.Namespace, stall: Stall, common: CommonOptions
) -> CommandResult:
    if args.command == "status":
        return commands.status(stall, common)
    if args.command == "add":
        return commands.add(
            stall, args.files, common,
            rename=args.rename, into=args.into,
            collect=args.collect, dry_run=args.dry_run,
        )
    if args.command == "rm":
        return commands.remove(
            stall, args.files, common,
            delete=args.delete, remote_naming=args.remote_naming,
            dry_run=args.dry_run,
        )
    if args.command == "mv":
        return commands.move(
            stall, args.source, args.target, common,
            move_file=args.move_file, force=args.force, dry_run=args.dry_run,
        )
    if args.command == "collect":
        return commands.collect(
            stall, common, args.files, force=args.force, dry_run=args.dry_run
        )
    if args.command == "distribute":
        return commands.distribute(
            stall, common, args.files, force=args.force, dry_run=args.dry_run
        )
    raise AssertionError(f"unhandled command {args.command}")


def run(args: argparse.Namespace) -> CommandResult:
    cfg = get_config(args.config)
    configure_logging(
        cfg.logging, verbose=args.verbose, quiet=args.quiet, trace=args.trace
    )
    common = CommonOptions(
        short_names=args.short_names or cfg.output.short_names,
        promote_warnings_to_errors=(
            args.promote_warnings_to_errors
            or cfg.output.promote_warnings_to_errors
        ),
        verbose=args.verbose,
        quiet=args.quiet,
        trace=args.trace,
    )
    if args.command == "init":
        path = resolve_stall_path(args.stall, cfg)
        return commands.init(path, common, dry_run=args.dry_run)

    stall = Stall.read_from_path(resolve_stall_path(args.stall, cfg))
    result = _dispatch(args, stall, common)
    if stall.modified() and not getattr(args, "dry_run", False):
        stall.save()
        log.info("Saved stall file %s", stall.load_path())
    return result


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        result = run(args)
    except StallError as e:
        code = map_exception(e)
        emit(
            CommandFailed(
                command=args.command, error_type=code, message=str(e)
            )
        )
        print(f"error[{code}]: {e}", file=sys.stderr)
        return 1
    if not args.quiet:
        for line in result.lines:
            print(line)
        for w in result.warnings:
            print(f"warning: {w}", file=sys.stderr)
    if args.trace:
        print(json.dumps(metrics.snapshot(), indent=2), file=sys.stderr)
    return 0


__all__ = ["build_parser", "main", "run"]
