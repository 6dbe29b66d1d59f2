"""
Ledger Logging Module

One JSON object per line for every store operation, carrying the ledger
owner, the operation name and the account, card, payee or budget line it
touched.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Record attributes copied into each JSON line when set
LEDGER_FIELDS = ("user_id", "action", "resource", "extra")

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """Render a record and its ledger fields as a JSON line"""

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

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "banking_ledger",
                  log_format: str = "json") -> logging.Logger:
    """
    Attach a single stream handler to the ledger logger

    Args:
        level: Level name, e.g. "INFO"
        logger_name: Logger to configure; store loggers are its children
        log_format: "json" for JSON lines, anything else for plain text

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "banking_ledger") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               user_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
    """
    Log one ledger operation

    Args:
        logger: Logger to write to
        level: Level name, e.g. "info" or "warning"
        message: Human readable summary
        user_id: Ledger owner
        action: Store operation name, e.g. "transfer"
        resource: What was touched, e.g. "account:ACC001"
        extra: Operation details such as amounts or error codes
    """
    fields = {"user_id": user_id, "action": action, "resource": resource, "extra": extra}
    logger.log(
        getattr(logging, level.upper()),
        message,
        extra={name: value for name, value in fields.items() if value}
    )
