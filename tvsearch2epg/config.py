"""
tvsearch2epg.config - Configuration management

Handles the XML settings file: creation of a default file, parsing with
validation and fallback defaults, and rewriting the channel selection.
The parsed result is an immutable GrabberConfig passed to each component.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class GrabberConfig:
    """Settings for one grabber run"""
    channels: List[str] = field(default_factory=list)
    days: int = 4
    offset: int = 0
    lang: str = "de"
    workers: int = 1
    rate_limit: float = 4.0
    timeout: float = 15.0
    deadline: float = 0.0
    retry_delay: float = 1.0
    logrotate: str = "true"
    log_retention_days: int = 30


class ConfigManager:
    """Manages the tvsearch2epg configuration file"""

    DEFAULT_CONFIG = """<?xml version="1.0" encoding="utf-8"?>
<settings version="1">
  <!-- Channel selection (comma separated ids, see the list-channels option) -->
  <setting id="channels"></setting>

  <!-- Basic guide settings -->
  <setting id="days">4</setting>
  <setting id="lang">de</setting>

  <!-- Network behaviour -->
  <setting id="workers">1</setting>
  <setting id="ratelimit">4.0</setting>
  <setting id="timeout">15</setting>
  <setting id="deadline">0</setting>
  <setting id="retrydelay">1.0</setting>

  <!-- Log retention -->
  <setting id="logrotate">true</setting>
  <setting id="relogs">30</setting>
</settings>"""

    # Valid settings, their types and bounds
    VALID_SETTINGS = {
        "channels": str,
        "days": int,
        "lang": str,
        "workers": int,
        "ratelimit": float,
        "timeout": float,
        "deadline": float,
        "retrydelay": float,
        "logrotate": str,
        "relogs": int,
    }

    DEFAULTS = {
        "channels": "",
        "days": 4,
        "lang": "de",
        "workers": 1,
        "ratelimit": 4.0,
        "timeout": 15.0,
        "deadline": 0.0,
        "retrydelay": 1.0,
        "logrotate": "true",
        "relogs": 30,
    }

    BOUNDS = {
        "days": (1, 14),
        "workers": (1, 10),
        "ratelimit": (0.5, 20.0),
        "timeout": (1.0, 300.0),
        "deadline": (0.0, 86400.0),
        "retrydelay": (0.0, 60.0),
        "relogs": (0, 3650),
    }

    SETTINGS_ORDER = list(VALID_SETTINGS)

    LOGROTATE_VALUES = ("true", "false", "daily", "weekly", "monthly")

    def __init__(self, config_file: Path):
        self.config_file = Path(config_file)
        self.settings: Dict[str, Any] = {}
        self.version: str = "1"

    def load_config(
        self, days: Optional[int] = None, offset: Optional[int] = None, workers: Optional[int] = None
    ) -> GrabberConfig:
        """Load and validate the configuration file, command line values win for this run"""
        if not self.config_file.exists():
            self._create_default_config()

        self._parse_config_file()
        self._set_defaults()
        self._validate_config()

        return GrabberConfig(
            channels=self.get_channel_list(),
            days=days if days is not None else self.settings["days"],
            offset=offset if offset is not None else 0,
            lang=self.settings["lang"] or "de",
            workers=workers if workers is not None else self.settings["workers"],
            rate_limit=self.settings["ratelimit"],
            timeout=self.settings["timeout"],
            deadline=self.settings["deadline"],
            retry_delay=self.settings["retrydelay"],
            logrotate=self.settings["logrotate"],
            log_retention_days=self.settings["relogs"],
        )

    def _create_default_config(self):
        """Create default configuration file"""
        logging.info("Creating default configuration: %s", self.config_file)

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True, mode=0o755)
        except OSError:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w", encoding="utf-8") as f:
            f.write(self.DEFAULT_CONFIG)

    def _parse_config_file(self):
        """Parse XML configuration file"""
        try:
            tree = ET.parse(self.config_file)
        except ET.ParseError as e:
            logging.error("Cannot parse configuration file %s: %s", self.config_file, e)
            raise

        root = tree.getroot()
        logging.info("Reading configuration from: %s", self.config_file)

        self.version = root.attrib.get("version", "1")
        self.settings = {}

        for setting in root.findall("setting"):
            setting_id = setting.get("id")

            # 'value' attribute first, then text
            setting_value = setting.get("value")
            if setting_value is None:
                setting_value = setting.text
            setting_value = setting_value.strip() if setting_value else ""

            logging.debug("Config setting: %s = %s", setting_id, setting_value)

            if setting_id not in self.VALID_SETTINGS:
                logging.warning(
                    "Unknown configuration setting: %s = %s (ignored)", setting_id, setting_value
                )
                continue

            self.settings[setting_id] = self._convert(setting_id, setting_value)

    def _convert(self, setting_id: str, value: str) -> Any:
        """Type-convert one setting, falling back to its default"""
        expected_type = self.VALID_SETTINGS[setting_id]
        if expected_type is str:
            return value

        if value == "":
            return self.DEFAULTS[setting_id]

        try:
            return expected_type(value)
        except ValueError:
            logging.warning(
                'Invalid %s setting "%s", using default %s',
                setting_id,
                value,
                self.DEFAULTS[setting_id],
            )
            return self.DEFAULTS[setting_id]

    def _set_defaults(self):
        """Set default values for missing settings"""
        for key, default_value in self.DEFAULTS.items():
            if key not in self.settings:
                self.settings[key] = default_value
                logging.debug("Set default: %s = %s", key, default_value)

    def _validate_config(self):
        """Clamp out-of-range values back to their defaults"""
        for key, (low, high) in self.BOUNDS.items():
            value = self.settings[key]
            if value < low or value > high:
                logging.warning(
                    "Invalid %s %s (allowed %s-%s), using default %s",
                    key,
                    value,
                    low,
                    high,
                    self.DEFAULTS[key],
                )
                self.settings[key] = self.DEFAULTS[key]

        logrotate = self.settings["logrotate"].lower()
        if logrotate not in self.LOGROTATE_VALUES:
            logging.warning('Invalid logrotate setting "%s", using default true', logrotate)
            logrotate = "true"
        self.settings["logrotate"] = logrotate

    def get_channel_list(self) -> List[str]:
        """Configured channel ids in configured order, duplicates removed"""
        channels = []
        for channel_id in self.settings.get("channels", "").split(","):
            channel_id = channel_id.strip()
            if channel_id and channel_id not in channels:
                channels.append(channel_id)
        return channels

    def save_channels(self, channel_ids: List[str]):
        """Rewrite the configuration file with a new channel selection"""
        if not self.config_file.exists():
            self._create_default_config()
        if not self.settings:
            self._parse_config_file()
            self._set_defaults()

        self.settings["channels"] = ",".join(channel_ids)
        self._write_clean_config()
        logging.info("Saved %d channel(s) to %s", len(channel_ids), self.config_file)

    def _write_clean_config(self):
        """Write all settings in canonical order"""
        root = ET.Element("settings", version=self.version)
        for setting_id in self.SETTINGS_ORDER:
            element = ET.SubElement(root, "setting", id=setting_id)
            element.text = str(self.settings.get(setting_id, self.DEFAULTS[setting_id]))

        ET.indent(root, space="  ")
        tree = ET.ElementTree(root)
        tree.write(self.config_file, encoding="utf-8", xml_declaration=True)

    def get_retention_config(self) -> Dict[str, Any]:
        """Log rotation settings for LogRotationManager"""
        logrotate = self.settings.get("logrotate", "true")
        enabled = logrotate != "false"
        interval = "daily" if logrotate in ("true", "daily") else logrotate
        return {
            "enabled": enabled,
            "interval": interval if enabled else None,
            "log_retention_days": self.settings.get("relogs", 30),
        }

    def log_config_summary(self, config: GrabberConfig):
        """Log configuration summary"""
        logging.info("Configuration values processed:")
        logging.info("  channels: %s", ", ".join(config.channels) or "(none)")
        logging.info("  days: %d (offset %d)", config.days, config.offset)
        logging.info("  lang: %s", config.lang)
        logging.info("  workers: %d", config.workers)
        logging.info("  ratelimit: %.1f requests/second", config.rate_limit)
        logging.info("  timeout: %.0f seconds per request", config.timeout)
        if config.deadline > 0:
            logging.info("  deadline: %.0f seconds", config.deadline)
        else:
            logging.info("  deadline: none")
        logging.info("  retrydelay: %.1f seconds", config.retry_delay)
