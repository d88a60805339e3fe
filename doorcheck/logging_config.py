# =======================================================================================
# doorcheck/logging_config.py - Logging Setup
# =======================================================================================
import logging
import sys

from .config import Config


def setup_logging(config: Config) -> None:
    """Configure application logging"""
    level = logging.DEBUG if config.API_DEBUG else getattr(logging, config.LOG_LEVEL, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    # Silence noisy libraries
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
