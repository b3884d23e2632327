"""Configuration management for Smart Tagger."""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_WORKERS = 32
DEFAULT_ID3_VERSION = 4
LOGGER_NAME = "smart_tagger"


def eprint(*args, **kwargs):
    """Print to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def _int_or_raw(value: Optional[str], default: int):
    """Parse an integer setting, keeping the raw string if it is not one."""
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return value


def load_config(env_file: Optional[str] = None) -> dict:
    """
    Load configuration from .env file.

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        Dictionary of configuration values.
    """
    if env_file is None:
        env_file = ".env"

    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        eprint(f"Loaded environment from {env_path.resolve()}")
    else:
        eprint(
            f"Warning: .env file not found at {env_path.resolve()} "
            "- falling back to process env."
        )

    return {
        "workers": _int_or_raw(os.getenv("SMART_TAGGER_WORKERS"), DEFAULT_WORKERS),
        "ffmpeg_path": os.getenv("SMART_TAGGER_FFMPEG") or None,
        "id3_version": _int_or_raw(
            os.getenv("SMART_TAGGER_ID3_VERSION"), DEFAULT_ID3_VERSION
        ),
        "log_file": os.getenv("SMART_TAGGER_LOG_FILE") or None,
    }


def validate_config(config: dict) -> List[str]:
    """
    Validate configuration and return list of problems.

    Args:
        config: Configuration dictionary from load_config()

    Returns:
        List of problem descriptions (empty if the config is usable).
    """
    problems = []

    workers = config.get("workers")
    if not isinstance(workers, int) or workers < 1:
        problems.append(f"SMART_TAGGER_WORKERS must be a positive integer, got {workers!r}")

    id3_version = config.get("id3_version")
    if id3_version not in (3, 4):
        problems.append(f"SMART_TAGGER_ID3_VERSION must be 3 or 4, got {id3_version!r}")

    return problems


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None) -> logging.Logger:
    """Configure logging with console and optional file handlers."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
