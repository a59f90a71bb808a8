from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(level: str = "INFO") -> None:
    """Route citation_metrics loggers to stderr at the requested level."""
    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=normalized, format=LOG_FORMAT)
    logging.getLogger("citation_metrics").setLevel(normalized)
