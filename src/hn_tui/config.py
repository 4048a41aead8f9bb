"""Configuration management for hn-tui."""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Use tomllib on Python 3.11+, fall back to tomli for 3.10
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 30


@dataclass
class ApiConfig:
    """Endpoints and transport settings for the content service."""

    items_url: str = "https://hacker-news.firebaseio.com/v0"
    search_url: str = "https://hn.algolia.com/api/v1"
    request_timeout: float = 10.0   # Seconds per HTTP request
    max_workers: int = 4            # Background fetch threads


@dataclass
class Config:
    """hn-tui configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    batch_size: int = DEFAULT_BATCH_SIZE  # Page size; a short page means no more data
    poll_interval: float = 0.2            # Seconds the loop blocks waiting for a key
    transient_seconds: float = 3.0        # Lifetime of transient status messages
    bookmarks_file: str | None = None     # Overrides the default bookmarks location
    debug_logging: bool = False           # Enable debug logging to file (opt-in)


def _config_home() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


CONFIG_DIR = _config_home() / "hn"
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOG_FILE = Path.home() / ".cache" / "hn" / "debug.log"


def _env_flag(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.lower() in ("true", "1", "yes")


def _env_number(name: str, cast, current):
    value = os.getenv(name)
    if value is None:
        return current
    try:
        return cast(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={value!r}")
        return current


def load_config() -> Config:
    """Load configuration from environment, file, or defaults.

    Priority (highest to lowest):
    1. Environment variables (HN_*)
    2. Config file (~/.config/hn/config.toml)
    3. Hardcoded defaults
    """
    config = Config()

    data = None
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to read config file {CONFIG_FILE}: {e}")

    if data is not None:
        api_data = data.get("api", {})
        if api_data:
            config.api = ApiConfig(
                items_url=api_data.get("items_url", config.api.items_url),
                search_url=api_data.get("search_url", config.api.search_url),
                request_timeout=api_data.get("request_timeout", config.api.request_timeout),
                max_workers=api_data.get("max_workers", config.api.max_workers),
            )
        config.batch_size = data.get("batch_size", config.batch_size)
        config.poll_interval = data.get("poll_interval", config.poll_interval)
        config.transient_seconds = data.get("transient_seconds", config.transient_seconds)
        config.bookmarks_file = data.get("bookmarks_file", config.bookmarks_file)
        config.debug_logging = data.get("debug_logging", config.debug_logging)

    # Environment variables override everything
    config.batch_size = _env_number("HN_BATCH_SIZE", int, config.batch_size)
    config.poll_interval = _env_number("HN_POLL_INTERVAL", float, config.poll_interval)
    config.api.request_timeout = _env_number(
        "HN_REQUEST_TIMEOUT", float, config.api.request_timeout
    )
    config.bookmarks_file = os.getenv("HN_BOOKMARKS_FILE", config.bookmarks_file)
    debug_logging_env = _env_flag("HN_DEBUG_LOGGING")
    if debug_logging_env is not None:
        config.debug_logging = debug_logging_env

    if config.batch_size < 1:
        logger.warning(f"batch_size must be positive, using {DEFAULT_BATCH_SIZE}")
        config.batch_size = DEFAULT_BATCH_SIZE

    return config


def save_config(config: Config) -> None:
    """Save configuration to file.

    Only values that differ from the defaults are written.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    defaults = Config()
    data: dict[str, Any] = {}

    for name in ("batch_size", "poll_interval", "transient_seconds", "debug_logging"):
        value = getattr(config, name)
        if value != getattr(defaults, name):
            data[name] = value

    if config.bookmarks_file:
        data["bookmarks_file"] = config.bookmarks_file

    # Save api config only if non-default
    if config.api != defaults.api:
        data["api"] = {
            "items_url": config.api.items_url,
            "search_url": config.api.search_url,
            "request_timeout": config.api.request_timeout,
            "max_workers": config.api.max_workers,
        }

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)


def bookmarks_path(config: Config | None = None) -> Path:
    """Resolve where the bookmark list lives.

    HN_BOOKMARKS_FILE wins, then the config file setting, then the
    XDG config directory.
    """
    env_path = os.getenv("HN_BOOKMARKS_FILE")
    if env_path:
        return Path(env_path)
    if config is not None and config.bookmarks_file:
        return Path(config.bookmarks_file).expanduser()
    return _config_home() / "hn" / "bookmarks.json"
