import logging
import sys
from typing import Optional

VERBOSITY_LEVELS = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
}


def level_for(verbosity: int, log_level: Optional[str] = None) -> int:
    """Map a ``-v`` count, or an explicit level name, to a logging level."""
    if log_level:
        level = logging.getLevelName(log_level.upper())
        if isinstance(level, int):
            return level
        raise ValueError(f"Unknown log level: {log_level}")
    return VERBOSITY_LEVELS.get(max(verbosity, 0), logging.DEBUG)


def setup_logging(verbosity: int = 0, log_level: Optional[str] = None) -> None:
    """Setup logging to stderr; stdout is reserved for the JSON result."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level_for(verbosity, log_level))

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)
