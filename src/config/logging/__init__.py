"""Logging estruturado JSON do wlink_bridge.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="wlink_bridge")
    logger = get_logger(__name__)
    logger.info("instance_state_updated", extra={"instance": "bot1"})

Campos presentes em todo log: asctime, level, logger, message,
correlation_id, service.
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
]
