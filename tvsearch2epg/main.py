#!/usr/bin/env python3
"""
tvsearch2epg - Swiss TV Guide Grabber

Catalog discovery, channel x day crawling and XMLTV output for tv.search.ch.
"""

import logging
import sys
import time
from pathlib import Path

from .args import ArgumentParser
from .config import ConfigManager, GrabberConfig
from .downloader import HttpFetcher, RateLimiter
from .logrotate import LogRotationManager
from .orchestrator import ScheduleOrchestrator
from .parser import (
    CatalogError,
    ChannelCatalog,
    DocumentParser,
    ProgrammeExtractor,
    ScheduleCrawler,
)
from .utils import Deadline, TimeUtils
from .xmltv import XmltvWriter

# Package version
from . import __version__


def setup_logging(logging_config: dict, log_file: Path, retention_config: dict):
    """Setup logging configuration with unified retention policy"""
    # Create log directory
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Determine file logging level based on mode
    if logging_config["level"] == "warning":
        file_level = logging.WARNING
    elif logging_config["level"] == "debug":
        file_level = logging.DEBUG
    else:  # default
        file_level = logging.INFO

    file_handler = LogRotationManager.create_rotating_handler(log_file, retention_config)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(message)s", datefmt="%Y/%m/%d %H:%M:%S")
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(file_level)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)

    # Console logging only if --console is specified (and not --quiet)
    if logging_config["console"] and not logging_config["quiet"]:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(file_level)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root_logger.addHandler(console_handler)

    return file_handler


def create_fetcher(config: GrabberConfig) -> HttpFetcher:
    """One shared session for all workers, rate ceiling shared as well"""
    rate_limiter = RateLimiter(max_requests_per_second=config.rate_limit)
    return HttpFetcher(timeout=config.timeout, pool_size=config.workers, rate_limiter=rate_limiter)


def open_output(output: Path):
    """XMLTV output stream: the requested file, stdout otherwise"""
    if output is None:
        return sys.stdout
    output.parent.mkdir(parents=True, exist_ok=True)
    return open(output, "w", encoding="utf-8")


def run_configure(fetcher: HttpFetcher, config_manager: ConfigManager) -> int:
    """Store every discovered channel id in the configuration file"""
    channels = ChannelCatalog(fetcher).discover_all()
    if not channels:
        logging.error("Channel catalog is empty - configuration left unchanged")
        return 1

    config_manager.save_channels(list(channels))
    print(f"{len(channels)} channels written to {config_manager.config_file}", file=sys.stderr)
    return 0


def run_list_channels(fetcher: HttpFetcher, config: GrabberConfig, output: Path) -> int:
    """XMLTV document holding the channel list only"""
    channels = ChannelCatalog(fetcher).discover_all()

    stream = open_output(output)
    try:
        writer = XmltvWriter(stream, lang=config.lang)
        writer.write_channels(channels.values())
        writer.close()
    finally:
        if stream is not sys.stdout:
            stream.close()
    return 0


def run_grab(fetcher: HttpFetcher, config: GrabberConfig, output: Path) -> int:
    """Catalog discovery, then the channel x day crawl streamed to XMLTV"""
    deadline = Deadline(config.deadline)
    document_parser = DocumentParser()

    catalog = ChannelCatalog(fetcher, document_parser)
    available = catalog.discover_all()

    selected = []
    for channel_id in config.channels:
        if channel_id in available:
            selected.append(available[channel_id])
        else:
            logging.warning("Configured channel %s is not in the catalog - ignored", channel_id)

    if not selected:
        logging.error("None of the configured channels is available")
        return 1

    crawler = ScheduleCrawler(fetcher, document_parser, retry_delay=config.retry_delay)
    extractor = ProgrammeExtractor(fetcher, document_parser)

    stream = open_output(output)
    try:
        writer = XmltvWriter(stream, lang=config.lang)
        writer.write_channels(selected)

        orchestrator = ScheduleOrchestrator(
            crawler, extractor, writer, max_workers=config.workers, deadline=deadline
        )
        try:
            orchestrator.run(
                [channel.id for channel in selected],
                TimeUtils.start_day(config.offset),
                config.days,
            )
        finally:
            # Always a well-formed document, even after an early stop
            writer.close()
    finally:
        if stream is not sys.stdout:
            stream.close()

    stats = orchestrator.get_statistics()
    logging.info("=" * 60)
    logging.info("GRAB SUMMARY:")
    logging.info("  Channels: %d (%d channel-days)", len(selected), stats["channel_days"])
    logging.info("  Programmes written: %d", stats["records_forwarded"])
    logging.info("  Listing retries: %d", stats["retries"])
    logging.info("  Abandoned days: %d", stats["abandoned_days"])
    logging.info("  Malformed listing rows: %d", stats["malformed_rows"])
    logging.info("  Unavailable detail pages: %d", stats["detail_failures"])
    logging.info("  Non-programme pages: %d", stats["non_programme_pages"])
    if orchestrator.deadline_reached:
        logging.warning("  Grab stopped early: overall deadline reached")
    return 0


def main():
    """Main application entry point"""
    python_start_time = time.time()

    try:
        # Parse command line arguments
        arg_parser = ArgumentParser()
        args = arg_parser.parse_args()

        defaults = arg_parser.get_system_defaults(args.basedir)
        config_file = args.config_file or defaults["config_file"]
        log_file = defaults["log_file"]

        arg_parser.create_directories(defaults)

        # Load and validate configuration
        config_manager = ConfigManager(config_file)
        config = config_manager.load_config(days=args.days, offset=args.offset, workers=args.workers)

        retention_config = config_manager.get_retention_config()
        logging_config = arg_parser.get_logging_config(args)
        setup_logging(logging_config, log_file, retention_config)

        # Start session logging
        logging.info("=" * 60)
        logging.info("tvsearch2epg session started - Version %s", __version__)
        if logging_config["level"] == "debug":
            logging.info("Debug logging enabled - all debug information will be logged")
        if logging_config["console"]:
            logging.info("Console logging enabled - logs also displayed on stderr")

        logging.info("Configuration loaded from: %s", config_file)
        config_manager.log_config_summary(config)

        grab_mode = not args.configure and not args.list_channels
        if grab_mode and not config.channels:
            logging.error(
                "No channels configured in %s - run with --configure or edit the channels setting",
                config_file,
            )
            logging.info("tvsearch2epg session ended with error")
            logging.info("=" * 60)
            return 1

        fetcher = create_fetcher(config)
        try:
            if args.configure:
                result = run_configure(fetcher, config_manager)
            elif args.list_channels:
                result = run_list_channels(fetcher, config, args.output)
            else:
                result = run_grab(fetcher, config, args.output)

            net_stats = fetcher.get_stats()
        finally:
            fetcher.close()

        total_time = time.time() - python_start_time
        logging.info("=" * 60)
        logging.info("NETWORK STATISTICS:")
        logging.info("  Total requests: %d", net_stats["total_requests"])
        logging.info("  Failed requests: %d", net_stats["failed_requests"])
        if net_stats["bytes_downloaded"] > 0:
            logging.info("  Data downloaded: %.2f MB", net_stats["bytes_downloaded"] / (1024 * 1024))
        if fetcher.rate_limiter and fetcher.rate_limiter.total_wait > 0:
            logging.info("  Rate limit waits: %.2f seconds", fetcher.rate_limiter.total_wait)
        logging.info("  Total execution time: %.2f seconds", total_time)

        if args.output is not None and result == 0 and not args.configure:
            logging.info("XMLTV output written to: %s", args.output)

        if result == 0:
            logging.info("tvsearch2epg session ended successfully")
        else:
            logging.info("tvsearch2epg session ended with error")
        logging.info("=" * 60)
        return result

    except CatalogError as e:
        logging.error("%s", e)
        logging.info("tvsearch2epg session ended with error")
        logging.info("=" * 60)
        return 1
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 1
    except Exception as e:
        logging.exception("Critical error: %s", str(e))
        logging.info("tvsearch2epg session ended with error")
        logging.info("=" * 60)
        return 1


if __name__ == "__main__":
    sys.exit(main())
