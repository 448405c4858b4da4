"""
tvsearch2epg.logrotate - Built-in log rotation

Builds the file handler used by setup_logging: a timed rotating handler
when rotation is enabled, a plain file handler otherwise.
"""

import logging
import logging.handlers
from pathlib import Path

# interval -> (when, interval, days per backup file)
ROTATION_INTERVALS = {
    "daily": ("midnight", 1, 1),
    "weekly": ("W0", 1, 7),
    "monthly": ("D", 30, 30),
}


class LogRotationManager:
    """Manages log rotation configuration and setup"""

    @staticmethod
    def backup_count(retention_days: int, interval: str) -> int:
        """Number of rotated files covering the retention period (0 = unlimited)"""
        if retention_days <= 0:
            return 0
        _, _, days_per_file = ROTATION_INTERVALS.get(interval, ROTATION_INTERVALS["daily"])
        return max(1, -(-retention_days // days_per_file))

    @staticmethod
    def create_rotating_handler(log_file: Path, retention_config: dict) -> logging.Handler:
        """
        Create appropriate log handler based on retention configuration.

        Args:
            log_file: Path to log file
            retention_config: Retention configuration from the config manager

        Returns:
            Configured logging handler
        """
        if not retention_config.get("enabled", False):
            logging.debug("Log rotation disabled - using standard FileHandler")
            return logging.FileHandler(log_file, mode="a", encoding="utf-8")

        interval = retention_config.get("interval") or "daily"
        when, when_interval, _ = ROTATION_INTERVALS.get(interval, ROTATION_INTERVALS["daily"])
        retention_days = retention_config.get("log_retention_days", 30)
        backup_count = LogRotationManager.backup_count(retention_days, interval)

        handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_file),
            when=when,
            interval=when_interval,
            backupCount=backup_count,
            encoding="utf-8",
        )

        logging.debug(
            "Log rotation enabled: %s rotation, %s retention (%d backup files)",
            interval,
            "unlimited" if retention_days == 0 else f"{retention_days} days",
            backup_count,
        )
        return handler
