"""Configuration management for MemoDays."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.events import DEFAULT_TAG, EventCategory

logger = logging.getLogger(__name__)

MEMODAYS_HOME = Path(os.environ.get("MEMODAYS_HOME", Path.home() / "memodays"))
CONFIG_FILE = MEMODAYS_HOME / "config" / "memodays.conf"
DATA_DIR = MEMODAYS_HOME / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    """MemoDays configuration."""

    data_file: str = ""
    refresh_interval: int = 60
    default_category: EventCategory = EventCategory.GENERAL
    default_tag: str = DEFAULT_TAG
    sort_by_date: bool = True

    @property
    def data_path(self) -> Path:
        """Resolved events file, defaulting to DATA_DIR/events.json."""
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "events.json"


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from memodays.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_file":
                config.data_file = value
            case "refresh_interval":
                try:
                    interval = int(value)
                except ValueError:
                    interval = 0
                if interval > 0:
                    config.refresh_interval = interval
                else:
                    logger.warning(f"Invalid REFRESH_INTERVAL: {value!r}, using {config.refresh_interval}")
            case "default_category":
                category = EventCategory.parse(value)
                if category.value != value.lower():
                    logger.warning(f"Unknown DEFAULT_CATEGORY: {value!r}, using {category.value}")
                config.default_category = category
            case "default_tag":
                config.default_tag = value
            case "sort_by_date":
                if value.lower() in _TRUE:
                    config.sort_by_date = True
                elif value.lower() in _FALSE:
                    config.sort_by_date = False
                else:
                    logger.warning(f"Invalid SORT_BY_DATE: {value!r}")

    return config
