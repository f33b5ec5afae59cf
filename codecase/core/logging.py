"""Logging setup for the API process."""
import logging

from codecase.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging once; debug mode forces DEBUG level."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("codecase").setLevel(level)
    # SQL echo is noisy; only surface it in debug mode
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.debug else logging.WARNING)
