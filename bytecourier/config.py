"""
Configuration management for ByteCourier.

Reads configuration from a .env file and environment variables with sensible defaults.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Default .env file location
DEFAULT_ENV_FILE = Path("courier.env")

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5566

logger = logging.getLogger(__name__)


def _load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = os.getenv("COURIER_ENV_FILE", str(DEFAULT_ENV_FILE))
    env_path = Path(env_file)

    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _parse_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value} (must be an integer)")


def _parse_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "")
    if value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value} (must be a number)")


@dataclass
class CourierConfig:
    """ByteCourier configuration loaded from .env file and environment variables."""

    # Server settings
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    output_dir: str = field(default_factory=tempfile.gettempdir)
    file_stem: str = "gh-woman"
    file_extension: str = ".jpeg"
    read_chunk_size: int = 8192

    # Client settings
    source_path: str = "gh-woman_200x250.jpeg"
    client_timeout_sec: Optional[float] = None  # None = wait indefinitely

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def load_config(cls) -> "CourierConfig":
        """
        Load configuration from environment variables.

        Returns:
            CourierConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        config = cls(
            host=os.getenv("COURIER_HOST", DEFAULT_HOST),
            port=_parse_int("COURIER_PORT", str(DEFAULT_PORT)),
            output_dir=os.getenv("COURIER_OUTPUT_DIR") or tempfile.gettempdir(),
            file_stem=os.getenv("COURIER_FILE_STEM", "gh-woman"),
            file_extension=os.getenv("COURIER_FILE_EXTENSION", ".jpeg"),
            read_chunk_size=_parse_int("COURIER_READ_CHUNK_SIZE", "8192"),
            source_path=os.getenv("COURIER_SOURCE_PATH", "gh-woman_200x250.jpeg"),
            client_timeout_sec=_parse_optional_float("COURIER_CLIENT_TIMEOUT_SEC"),
            log_level=os.getenv("COURIER_LOG_LEVEL", "INFO"),
            log_file=os.getenv("COURIER_LOG_FILE") or None,
        )

        # Validate configuration
        config.validate()

        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        # 0 asks the OS for an ephemeral port
        if self.port < 0 or self.port > 65535:
            raise ValueError(f"Invalid port: {self.port} (must be 0-65535)")

        if self.read_chunk_size <= 0:
            raise ValueError(f"Invalid read chunk size: {self.read_chunk_size} (must be > 0)")

        if self.client_timeout_sec is not None and self.client_timeout_sec <= 0:
            raise ValueError(f"Invalid client timeout: {self.client_timeout_sec} (must be > 0)")

        if not self.file_stem:
            raise ValueError("File stem cannot be empty")

        if not self.file_extension.startswith("."):
            raise ValueError(
                f"Invalid file extension: {self.file_extension} (must start with '.')"
            )

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_log_levels:
            raise ValueError(
                f"Invalid log level: {self.log_level} "
                f"(must be one of: {', '.join(valid_log_levels)})"
            )


def load_config() -> CourierConfig:
    """
    Load and validate ByteCourier configuration from environment variables.

    Returns:
        CourierConfig instance with loaded and validated values

    Raises:
        ValueError: If configuration is invalid
    """
    try:
        return CourierConfig.load_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise
