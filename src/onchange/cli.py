"""CLI entry point for onchange: watch paths and run a command on change."""

import argparse
import logging
import sys
from pathlib import Path

from onchange import __version__
from onchange.controller import WatchController
from onchange_core.config import Settings, load_settings
from onchange_core.filters import FilterBuildError
from onchange_core.notifier import ConsoleNotifier

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="onchange",
        description="Execute commands when watched files change.",
        epilog="Examples:\n"
        "  onchange -e py -- pytest -x          # Run tests when Python files change\n"
        "  onchange -r -w src -- python app.py  # Restart a server on every change\n"
        "  onchange -i 'build/' -c make         # Clear screen, ignore build output\n"
        "  onchange --config onchange.toml      # Read settings from a file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Everything from the first positional on belongs to the command, dashes included
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to execute")
    parser.add_argument(
        "-w",
        "--watch",
        action="append",
        metavar="PATH",
        help="Path to watch (repeatable, default: .)",
    )
    parser.add_argument(
        "-e",
        "--exts",
        action="append",
        metavar="EXTS",
        help="Comma-separated list of file extensions to watch (js,css,html)",
    )
    parser.add_argument(
        "-f",
        "--filter",
        action="append",
        metavar="PATTERN",
        help="Ignore all modifications except those matching the pattern",
    )
    parser.add_argument(
        "-i",
        "--ignore",
        action="append",
        metavar="PATTERN",
        help="Ignore modifications to paths matching the pattern",
    )
    parser.add_argument(
        "-c", "--clear", action="store_true", default=None, help="Clear screen before executing command"
    )
    parser.add_argument(
        "-r", "--restart", action="store_true", default=None, help="Restart the process if it's still running"
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Print diagnostic messages")
    parser.add_argument(
        "-d",
        "--debounce",
        type=int,
        metavar="MS",
        help="Milliseconds to wait for a burst of changes to settle (default: 250)",
    )
    parser.add_argument("--config", metavar="FILE", help="TOML file with a [watch] settings table")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)
    if args.command[:1] == ["--"]:
        args.command = args.command[1:]
    return args


def build_settings(args: argparse.Namespace) -> Settings:
    """
    Merge the optional config file with command-line flags.

    Flags win over the file; pattern and extension lists from both are combined.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the resulting settings are invalid
    """
    values = load_settings(args.config) if args.config else {}

    if args.command:
        values["command"] = " ".join(args.command)
    if args.watch:
        values["paths"] = [Path(p) for p in args.watch]
    for key, extra in (("extensions", args.exts), ("filters", args.filter), ("ignores", args.ignore)):
        if extra:
            values[key] = list(values.get(key, [])) + extra
    for key in ("restart", "clear", "verbose"):
        flag = getattr(args, key)
        if flag is not None:
            values[key] = flag
    if args.debounce is not None:
        values["debounce_ms"] = args.debounce

    values.setdefault("command", "")
    settings = Settings(**values)
    settings.validate()
    return settings


def configure_logging(verbose: bool) -> None:
    """Send onchange's own log records to stderr; DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    for name in ("onchange", "onchange_core"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for onchange CLI.

    Exit codes: 1 for configuration errors or a lost event source,
    130 on Ctrl+C.
    """
    args = parse_args(argv)

    try:
        settings = build_settings(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.verbose)

    try:
        controller = WatchController(settings, notifier=ConsoleNotifier())
    except FilterBuildError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        print(f"invalid path: {e.filename}", file=sys.stderr)
        sys.exit(1)

    try:
        controller.run_forever()
    except KeyboardInterrupt:
        # Gracefully handle Ctrl+C
        sys.exit(130)
    except Exception as e:
        # Includes ChannelClosed: nothing left to watch
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
