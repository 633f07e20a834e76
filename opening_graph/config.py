"""Environment configuration for the opening graph tools."""

import logging
import os

DEFAULT_OPENINGS_SOURCE = "data/lichess-openings.json"
LICHESS_OPENINGS_REPO = "https://raw.githubusercontent.com/lichess-org/chess-openings/master"


def get_connection_string() -> str:
    """Get database connection string from environment."""
    return os.environ.get(
        "DATABASE_URL",
        "postgresql://localhost:5432/opening_graphs?user=postgres&password=postgres",
    )


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def get_openings_source() -> str:
    """Path or URL of the opening name/ECO database."""
    return os.environ.get("OPENINGS_SOURCE", DEFAULT_OPENINGS_SOURCE)


def configure_logging(level: str | None = None) -> None:
    """Basic logging setup for command-line entry points and workers."""
    level = (level or os.environ.get("OPENING_GRAPH_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
