import logging
import os
import sys
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Keys dropped from `extra` before they reach a log line
SENSITIVE_KEYS = {"password", "password_hash", "token", "authorization"}


class RedactingFilter(logging.Filter):
    """Mask sensitive attributes passed through `extra`"""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in SENSITIVE_KEYS:
            if hasattr(record, key):
                setattr(record, key, "[REDACTED]")
        return True


def get_logger(name: str = "todo_api") -> logging.Logger:
    """
    Return the application logger, configuring its handler once

    Args:
        name: Logger name

    Returns:
        Configured logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RedactingFilter())
        log.addHandler(handler)
        log.setLevel(LOG_LEVEL)
        log.propagate = False
    return log


logger = get_logger()
