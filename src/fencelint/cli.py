"""CLI for fencelint - lint fenced code blocks in Markdown documentation."""

import argparse
import logging
import platform
import sys
from pathlib import Path

from . import __version__
from .config import FencelintConfig, load_config
from .errors import FencelintError
from .report import render_json, render_summary, render_text
from .runtime import Runtime, build_runtime


def _apply_overrides(config: FencelintConfig, args: argparse.Namespace) -> FencelintConfig:
    """CLI flags win over the configuration file."""
    if getattr(args, "allow", None):
        config.allow = config.allow + args.allow
    if getattr(args, "allow_file", None) is not None:
        config.allow_file = args.allow_file
    if getattr(args, "language", None):
        config.languages = args.language
    if getattr(args, "exclude", None):
        config.exclude = config.exclude + args.exclude
    if getattr(args, "extension", None):
        config.extensions = args.extension
    if getattr(args, "require_language", False):
        config.require_language = True
    if getattr(args, "no_xref", False):
        config.xref = False
    if getattr(args, "fail_on", None):
        config.fail_on = args.fail_on
    if getattr(args, "debounce_ms", None) is not None:
        config.watch.debounce_ms = args.debounce_ms
    return config


def cmd_check(args: argparse.Namespace, rt: Runtime) -> int:
    """Lint documents and print the report."""
    documents = rt.corpus.load_all(args.paths)
    report = rt.linter.lint(documents)

    if args.json:
        print(render_json(report))
    else:
        for line in render_text(report):
            print(line)
        if not args.quiet:
            print(render_summary(report), file=sys.stderr)

    return report.exit_code(rt.fail_on)


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch documents and re-lint them on change."""
    from .watch import watch_paths

    return watch_paths(
        paths=args.paths,
        rt=rt,
        debounce_ms=rt.config.watch.debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_languages(args: argparse.Namespace, rt: Runtime) -> int:
    """List the languages that have a syntax validator."""
    for v in rt.registry.validators():
        print(f"{v.name}\t{', '.join(v.tags)}")
    return 0


def _version_text() -> str:
    return (
        f"fencelint {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_lint_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("paths", nargs="+", type=Path, help="Files or directories to lint")
    p.add_argument(
        "--allow", action="append", default=[], metavar="NAME",
        help="Name snippets may use without defining it (repeatable)",
    )
    p.add_argument(
        "--allow-file", type=Path, default=None,
        help="File listing allowed external names, one per line (or YAML list)",
    )
    p.add_argument(
        "--language", action="append", default=[], metavar="TAG",
        help="Only validate these languages (repeatable)",
    )
    p.add_argument(
        "--exclude", action="append", default=[], metavar="GLOB",
        help="Skip paths matching this pattern (repeatable)",
    )
    p.add_argument(
        "--extension", action="append", default=[], metavar="EXT",
        help="Document extensions to pick up in directories (default: .md, .markdown)",
    )
    p.add_argument(
        "--require-language", action="store_true",
        help="Warn about fences without a language tag",
    )
    p.add_argument(
        "--no-xref", action="store_true",
        help="Skip the cross-reference check",
    )
    p.add_argument(
        "--fail-on", choices=["error", "warning"], default=None,
        help="Lowest severity that fails the run (default: error)",
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="fencelint", description="Lint fenced code blocks in Markdown"
    )
    parser.add_argument(
        "--version", action="version", version=_version_text()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/fencelint.toml, cwd/pyproject.toml)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # check command
    parser_check = subparsers.add_parser("check", help="Lint documents")
    _add_lint_options(parser_check)

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Re-lint documents as they change")
    _add_lint_options(parser_watch)
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=None,
        help="Debounce window in milliseconds (default: 150)",
    )

    # languages command
    subparsers.add_parser("languages", help="List languages with a syntax validator")

    args = parser.parse_args()
    _configure_logging(args.verbose)

    handlers = {
        "check": cmd_check,
        "watch": cmd_watch,
        "languages": cmd_languages,
    }
    handler = handlers.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(2)

    try:
        config = _apply_overrides(load_config(args.config), args)
        rt = build_runtime(config=config)
        exit_code = handler(args, rt)
    except FencelintError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
