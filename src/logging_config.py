"""Configure farm shop logging using the Python standard library.

Records are formatted as JSON with a timestamp, level, logger, module and
message.  Structured fields are attached by callers through
``extra={"extra": {...}}`` and merged into the top level of the record.
"""

import json
import logging
import logging.handlers
import os
from datetime import UTC, datetime

LOG_FILE_NAME = "farm_shop.log"


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            # merged flat; the basic fields above always win
            for key, value in extra.items():
                log_record.setdefault(key, value)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(log_dir: str = "logs", level: int = logging.INFO, console: bool = True) -> None:
    """Configure the root logger with JSON formatting.

    Args:
        log_dir: Directory for the rotating log file.  Created if missing.
        level: Logging level for the root logger and its handlers.
        console: Also log to stderr.  The interactive CLI turns this off so
            log lines do not interleave with prompts.
    """
    os.makedirs(log_dir, exist_ok=True)
    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    formatter = JsonFormatter()
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)
    file_handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=1024 * 1024,  # 1 MB per log file
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
