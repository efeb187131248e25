"""Process-wide logging for the agent.

Every module logs through ``get_logger(__name__)``; ``setup_logging`` is
called once by the server entry point. The level comes from ``LOG_LEVEL``.
"""

import logging
import os
import sys

from pydantic import BaseModel

# Provider SDKs and the ASGI server log every request at INFO
QUIET_LOGGERS = ("anthropic", "httpx", "uvicorn.access")


def _env_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    quiet_loggers: tuple[str, ...] = QUIET_LOGGERS

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Build the configuration from the LOG_LEVEL variable."""
        return cls(level=_env_level())


def setup_logging(config: LogConfig | None = None) -> None:
    """Route all agent logs to stdout with a single format."""
    config = config or LogConfig.from_env()

    logging.basicConfig(
        level=config.level.upper(),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Return the logger for a module, with LOG_LEVEL unless a level is given."""
    logger = logging.getLogger(name)
    logger.setLevel((level or _env_level()).upper())
    return logger
