"""
Logging setup for the loyalty portal.

Text output by default; set LOG_FORMAT=json for one JSON object per line
(what the log drain in production expects).
"""
import json
import logging
import os
import sys
from datetime import datetime
from typing import Optional


class JsonFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.utcnow().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'client_id'):
            log_data['client_id'] = record.client_id

        if hasattr(record, 'details'):
            log_data['details'] = record.details

        return json.dumps(log_data, default=str)


def setup_logging(level: Optional[str] = None, format_type: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (defaults to LOG_LEVEL env var, then INFO)
        format_type: 'text' or 'json' (defaults to LOG_FORMAT env var)
    """
    level = level or os.getenv('LOG_LEVEL', 'INFO')
    format_type = format_type or os.getenv('LOG_FORMAT', 'text')
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == 'json':
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    # Quiet chatty libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
