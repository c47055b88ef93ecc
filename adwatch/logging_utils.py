import logging
import os

LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'


def setup_logger(name: str) -> logging.Logger:
    """Set up logger with appropriate level based on environment."""
    logger = logging.getLogger(name)

    level = logging.DEBUG if os.getenv('DEBUG', '').lower() == 'true' else logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        # Handled here, keep uvicorn's root config from printing it twice
        logger.propagate = False

    return logger
