"""Logging utilities for the cipher service."""
import logging
import sys

from cipher_service.core.config import Settings
from cipher_service.core.request_context import get_request_id

LOGGER_NAME = "cipher_service"


def configure_logging(
    settings: Settings, *,
    logger_name: str = LOGGER_NAME,
) -> logging.Logger:
    """Configure the root logger and return the application logger.

    Args:
        settings: Application settings containing log-level information.
        logger_name: Name of the logger to retrieve.

    Returns:
        Configured logger instance.
    """

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=(
            "%(asctime)s - %(name)s - %(levelname)s - "
            "[%(filename)s:%(lineno)d] - request_id=%(request_id)s - %(message)s"
        ),
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    old_factory = logging.getLogRecordFactory()
    if not getattr(old_factory, "_injects_request_id", False):

        def record_factory(*args, **kwargs) -> logging.LogRecord:
            record = old_factory(*args, **kwargs)
            record.request_id = get_request_id() or "system"
            return record

        record_factory._injects_request_id = True
        logging.setLogRecordFactory(record_factory)

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    logger.debug("Logging configured with level %s", logging.getLevelName(log_level))
    return logger
