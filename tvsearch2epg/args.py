"""
tvsearch2epg.args - Command line argument parsing

XMLTV grabber baseline options plus channel configuration and logging control.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional


class ArgumentParser:
    """Command line argument parser"""

    DAYS_RANGE = (1, 14)
    OFFSET_RANGE = (0, 14)

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the argument parser"""
        parser = argparse.ArgumentParser(
            prog="tvsearch2epg",
            description="Swiss TV guide grabber (tv.search.ch) producing XMLTV",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  tvsearch2epg --capabilities
  tvsearch2epg --configure                      # Select every available channel
  tvsearch2epg --list-channels                  # XMLTV channel list only
  tvsearch2epg --days 2 --output guide.xml
  tvsearch2epg --days 4 --offset 1 --workers 4 --console

Configuration:
  Default config: ~/tvsearch2epg/conf/tvsearch2epg.xml
  Default logs:   ~/tvsearch2epg/log/
  Edit the "channels" setting to keep only the channels you want.

Logging Levels:
  (default)       Info, warnings and errors to file only, XML to console
  --warning       Only warnings and errors to file, XML to console
  --debug         All debug information to file only, XML to console
  --console       Display active log level to console (can combine with --warning/--debug)
  --quiet         No console output except XML, logs to file only

Duration Options:
  --days          Number of days to grab (1-14, at most 4 are published reliably)
  --offset        Start with data for today plus N days (0-14)
            """,
        )

        # XMLTV baseline capabilities
        parser.add_argument(
            "--description", "-d", action="store_true", help="Show grabber description and exit"
        )
        parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
        parser.add_argument(
            "--capabilities", "-c", action="store_true", help="Show capabilities and exit"
        )

        # Channel configuration
        parser.add_argument(
            "--configure",
            action="store_true",
            help="Discover all channels and store them in the configuration file",
        )
        parser.add_argument(
            "--list-channels",
            action="store_true",
            help="Write an XMLTV document with all available channels and exit",
        )

        # Log level selection
        level_group = parser.add_mutually_exclusive_group()
        level_group.add_argument(
            "--warning", "-w", action="store_true", help="Only warnings and errors to file"
        )
        level_group.add_argument(
            "--debug", action="store_true", help="All debug information to file (very verbose)"
        )

        # Console output control
        console_group = parser.add_mutually_exclusive_group()
        console_group.add_argument(
            "--console",
            action="store_true",
            help="Display active log level to console (can combine with --warning/--debug)",
        )
        console_group.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="No console output except XML, logs to file only",
        )

        # Output control
        parser.add_argument(
            "--output", "-o", type=Path, help="Redirect XMLTV output to specified file"
        )

        # Guide parameters
        parser.add_argument("--days", type=int, help="Number of days to grab (1-14)")
        parser.add_argument("--offset", type=int, help="Start with data for day today plus X days")
        parser.add_argument(
            "--workers",
            type=int,
            metavar="N",
            help="Channels crawled in parallel (1-10, default from configuration)",
        )

        # Configuration
        parser.add_argument("--config-file", type=Path, help="Configuration file path")
        parser.add_argument("--basedir", type=Path, help="Base directory for config and logs")

        return parser

    def parse_args(self, args=None):
        """Parse command line arguments"""
        args = self.parser.parse_args(args)

        # Handle special actions that exit immediately
        if args.description:
            print("Switzerland (tv.search.ch using tvsearch2epg)")
            sys.exit(0)

        if args.version:
            from . import __version__

            print(__version__)
            sys.exit(0)

        if args.capabilities:
            print("baseline")
            print("manualconfig")
            sys.exit(0)

        self._validate_args(args)
        return args

    def _validate_args(self, args):
        """Validate argument values"""
        if args.days is not None:
            low, high = self.DAYS_RANGE
            if not low <= args.days <= high:
                self.parser.error(f"Parameter [--days] must be {low}-{high}, got: {args.days}")

        if args.offset is not None:
            low, high = self.OFFSET_RANGE
            if not low <= args.offset <= high:
                self.parser.error(f"Parameter [--offset] must be {low}-{high}, got: {args.offset}")

        if args.workers is not None and not 1 <= args.workers <= 10:
            self.parser.error("Parameter [--workers] must be 1-10 to avoid server overload")

        if args.configure and args.list_channels:
            self.parser.error("--configure and --list-channels are mutually exclusive")

    def get_logging_config(self, args):
        """Determine logging configuration from arguments"""
        config = {
            "level": "default",
            "console": False,
            "quiet": False,
        }

        if args.debug:
            config["level"] = "debug"
        elif args.warning:
            config["level"] = "warning"

        if args.console:
            config["console"] = True
        elif args.quiet:
            config["quiet"] = True

        return config

    def get_system_defaults(self, basedir_override: Optional[Path] = None):
        """Get default directories"""
        base_dir = basedir_override or Path.home() / "tvsearch2epg"

        return {
            "base_dir": base_dir,
            "conf_dir": base_dir / "conf",
            "log_dir": base_dir / "log",
            "config_file": base_dir / "conf" / "tvsearch2epg.xml",
            "log_file": base_dir / "log" / "tvsearch2epg.log",
        }

    def create_directories(self, defaults: dict):
        """Create required directories with 755 permissions"""
        for directory in (defaults["conf_dir"], defaults["log_dir"]):
            try:
                directory.mkdir(parents=True, exist_ok=True, mode=0o755)
            except OSError as e:
                logging.warning("Cannot create directory %s: %s", directory, e)
