"""
Configuration management for netcluster.

Loads configuration from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from netcluster.config import config

    target = config.detection.number_of_communities
    level = config.logging.level
"""

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _read_int(var_name: str, default: Optional[int]) -> Optional[int]:
    """Read an integer environment variable, raising a helpful error if malformed."""
    raw = os.getenv(var_name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(
            f"Environment variable {var_name} must be an integer, got {raw!r}"
        ) from e


@dataclass
class DetectionConfig:
    """Defaults for community detection runs."""
    number_of_communities: int = 1

    def __post_init__(self):
        """Validate the target community count."""
        if self.number_of_communities < 1:
            raise ValueError(
                f"number_of_communities must be >= 1, got {self.number_of_communities}"
            )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"

    def __post_init__(self):
        """Normalise and validate the level name."""
        self.level = (self.level or "INFO").upper()
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Unknown log level {self.level!r}; expected one of {', '.join(VALID_LOG_LEVELS)}"
            )


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.detection = DetectionConfig(
            number_of_communities=_read_int("NETCLUSTER_TARGET_COMMUNITIES", 1)
        )
        self.logging = LoggingConfig(level=os.getenv("NETCLUSTER_LOG_LEVEL", "INFO"))
        self.random_seed: Optional[int] = _read_int("NETCLUSTER_RANDOM_SEED", None)


# Global config instance
config = Config()


def resolve_seed(seed: Optional[int]) -> Optional[int]:
    """Return *seed*, or ``config.random_seed`` when no seed was given."""
    return seed if seed is not None else config.random_seed
