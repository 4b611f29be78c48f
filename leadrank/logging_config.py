"""
Structured logging configuration.

Called once from create_app() (and from the worker / seed script). Text or
single-line JSON on stderr, chosen by LOG_FORMAT; level from LOG_LEVEL.
"""
import json
import logging
import sys
from datetime import datetime, timezone

from leadrank import config

# Extra attributes copied into JSON entries when a call passes them via `extra=`
CONTEXT_FIELDS = ('run_id', 'lead_id', 'batch_size')


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregators."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


TEXT_FORMAT = '%(asctime)s %(levelname)-7s [%(name)s] %(message)s'

# Chatty at INFO: HTTP plumbing under the LLM SDK, RQ job chatter
_NOISY_LOGGERS = [
    'urllib3',
    'openai',
    'httpcore',
    'httpx',
    'rq',
]


def _resolve_level(level_name):
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(app=None, level=None, fmt=None):
    """
    Install a single stderr handler on the root logger.

    `level` / `fmt` override LOG_LEVEL / LOG_FORMAT. Safe to call twice;
    earlier handlers are replaced.
    """
    level_name = (level or config.LOG_LEVEL or 'INFO').upper()
    log_level = _resolve_level(level_name)
    log_format = (fmt or config.LOG_FORMAT or 'text').lower()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app is not None:
        app.logger.debug("Logging configured (level=%s, format=%s)", level_name, log_format)
    return handler
