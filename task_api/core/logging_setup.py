"""Logging configuration for the ``task_api`` logger tree.

Only the ``task_api`` logger is configured, and it still propagates, so
handlers installed on the root logger by a server or test runner keep
receiving records.
"""

import json
import logging
import logging.config
from datetime import datetime, timezone

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime', 'taskName'}


def record_extras(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and value is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            **record_extras(record),
        }
        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def _level_name(level: str) -> str:
    name = level.upper()
    return name if isinstance(logging.getLevelName(name), int) else 'INFO'


def build_logging_config(level: str = 'INFO', fmt: str = 'text') -> dict:
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'text': {'format': '[%(asctime)s] %(levelname)s: %(name)s: %(message)s'},
            'json': {'()': JSONFormatter},
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'json' if fmt == 'json' else 'text',
            },
        },
        'loggers': {
            'task_api': {
                'handlers': ['console'],
                'level': _level_name(level),
                'propagate': True,
            },
        },
    }


def setup_logging(level: str = 'INFO', fmt: str = 'text') -> None:
    # Re-running replaces the task_api handlers instead of stacking them.
    logging.config.dictConfig(build_logging_config(level, fmt))
