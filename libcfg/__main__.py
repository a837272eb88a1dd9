"""
Command-line front end for libcfg.

Usage:
    python -m libcfg /path/to/app.cfg                 # print normalized document
    python -m libcfg /path/to/app.cfg --get a.b[0]    # print one value
    python -m libcfg /path/to/app.cfg --check         # parse only
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import Config
from .const import DEFAULT_TAB_WIDTH
from .errors import ConfigError, SettingNotFoundError
from .logging import LogConfig, get_logger, setup_logging
from .options import ConfigOptions
from .syntax.writer import ConfigWriter

logger = get_logger("main")


def print_value(config: Config, path: str) -> int:
    """Print the setting at path; scalars bare, aggregates as config text."""
    try:
        setting = config.lookup(path)
    except SettingNotFoundError as e:
        print(f"Setting not found: {e}", file=sys.stderr)
        return 1

    if setting.is_scalar:
        value = setting.value
        if isinstance(value, bool):
            print("true" if value else "false")
        else:
            print(value)
    else:
        writer = ConfigWriter(config.options)
        print("\n".join(writer.format_value(setting, 0)))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="libcfg",
        description="Read, query and normalize structured configuration files",
    )

    parser.add_argument("config", help="Path to configuration file")

    parser.add_argument(
        "-g", "--get",
        metavar="PATH",
        help="Print the value at PATH (e.g. server.ports[0])",
    )

    parser.add_argument(
        "-c", "--check",
        action="store_true",
        help="Only check that the file parses",
    )

    parser.add_argument(
        "-I", "--include-dir",
        metavar="DIR",
        help="Directory for relative @include paths",
    )

    parser.add_argument(
        "--allow-overrides",
        action="store_true",
        help="Let repeated setting names replace earlier ones",
    )

    parser.add_argument(
        "--tab-width",
        type=int,
        default=DEFAULT_TAB_WIDTH,
        help="Indentation width of the printed document (default: %(default)s)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    log_config = LogConfig()

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"

    if args.no_color:
        log_config.console_colors = False

    if args.log_file:
        log_config.file_enabled = True
        log_config.file_path = args.log_file

    setup_logging(log_config)

    options = ConfigOptions(
        allow_overrides=args.allow_overrides,
        include_dir=Path(args.include_dir) if args.include_dir else None,
        tab_width=args.tab_width,
    )
    config = Config(options)

    try:
        config.read_file(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger.info(f"Read {args.config}: {len(config.root)} top-level settings")

    if args.check:
        if not args.quiet:
            print(f"{args.config}: OK")
        return 0

    if args.get:
        return print_value(config, args.get)

    config.write(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
