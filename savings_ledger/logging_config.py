"""
Structured Logging Configuration Module

Every ledger action is logged as one record carrying the action name and, when
they apply, the customer id, transaction id and rejection reason as
first-class fields, so a JSON log line can be filtered by customer or cause
without parsing the message.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

# Record attributes promoted to top-level JSON keys
LEDGER_FIELDS = ("action", "customer_id", "transaction_id", "reason")


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ledger fields are top-level keys"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in LEDGER_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        details = getattr(record, 'details', None)
        if details:
            log_entry["details"] = details

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class LedgerTextFormatter(logging.Formatter):
    """Plain text lines with ledger fields appended as key=value pairs"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        pairs = [
            f"{name}={getattr(record, name)}"
            for name in LEDGER_FIELDS
            if getattr(record, name, None) is not None
        ]
        return f"{line} [{' '.join(pairs)}]" if pairs else line


def setup_logging(level: str = "INFO", log_format: str = "json",
                  logger_name: str = "savings") -> logging.Logger:
    """
    Setup logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for structured output, "text" for plain lines
        logger_name: Name of the root application logger

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if log_format == "json" else LedgerTextFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "savings") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None,
               customer_id: Optional[int] = None,
               transaction_id: Optional[int] = None,
               reason: Optional[str] = None,
               details: Optional[dict] = None):
    """
    Log a ledger action.

    Args:
        logger: Logger instance
        level: Log level name (info, warning, ...)
        message: Human-readable message
        action: Ledger operation, e.g. "deposit"
        customer_id: Customer the action applies to
        transaction_id: Transaction created by the action
        reason: Rejection reason value for refused operations
        details: Any further structured data (amounts, balances)
    """
    log_level = getattr(logging, level.upper())
    if not logger.isEnabledFor(log_level):
        return

    logger.log(log_level, message, extra={
        "action": action,
        "customer_id": customer_id,
        "transaction_id": transaction_id,
        "reason": reason,
        "details": details,
    })
