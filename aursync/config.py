"""Configuration management for aursync."""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from .platform import normalize_path

load_dotenv()  # Load .env file if it exists

DEFAULT_AUR_URL = "https://aur.archlinux.org"


@dataclass
class Config:
    """Configuration class for aursync with validation and defaults."""

    # Storage
    cache_dir: Path = field(default_factory=lambda: Path.home() / ".cache" / "aursync")

    # Remote endpoints
    aur_url: str = DEFAULT_AUR_URL
    branch: str = "master"

    # Logging
    log_level: str = "INFO"

    # Timeouts (seconds)
    request_timeout: float = 30.0
    fetch_timeout: float = 300.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.cache_dir = normalize_path(self.cache_dir)
        self.aur_url = self.aur_url.rstrip("/")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        self.log_level = self.log_level.upper()
        if self.log_level not in valid_log_levels:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {valid_log_levels}")

        if not self.aur_url:
            raise ValueError("aur_url must not be empty")

        if not self.branch:
            raise ValueError("branch must not be empty")

        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")

    def package_url(self, name: str) -> str:
        """Git endpoint of a package, addressed as ``aur_url/name``."""
        return f"{self.aur_url}/{name}"


def load_configuration() -> Config:
    """Load configuration from environment variables with defaults."""
    try:
        kwargs = {
            "aur_url": os.getenv("AURSYNC_AUR_URL", DEFAULT_AUR_URL),
            "branch": os.getenv("AURSYNC_BRANCH", "master"),
            "log_level": os.getenv("AURSYNC_LOG_LEVEL", "INFO"),
            "request_timeout": float(os.getenv("AURSYNC_REQUEST_TIMEOUT", "30")),
            "fetch_timeout": float(os.getenv("AURSYNC_FETCH_TIMEOUT", "300")),
        }
        cache_dir = os.getenv("AUR_CACHE_DIR")
        if cache_dir:
            kwargs["cache_dir"] = Path(cache_dir)
        return Config(**kwargs)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Configuration error: {e}")


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    errors = []

    try:
        config.cache_dir.mkdir(parents=True, exist_ok=True)
        test_file = config.cache_dir / ".test_write"
        test_file.write_text("test")
        test_file.unlink()
    except PermissionError:
        errors.append(f"ERROR: No write permission for cache directory: {config.cache_dir}")
    except OSError as e:
        errors.append(f"ERROR: Cannot access cache directory {config.cache_dir}: {e}")

    if not config.aur_url.startswith(("http://", "https://", "git@", "file://", "/")):
        errors.append(f"WARNING: AUR URL may be invalid: {config.aur_url}")

    if errors:
        logging.getLogger('aursync.config').debug(f"Configuration issues: {errors}")

    return errors
