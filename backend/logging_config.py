"""Logging configuration for the checklist backend."""
import logging
import os
import json
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request
from shared.models import now


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, with request details when logged inside a request."""

    def format(self, record):
        log_entry = {
            'timestamp': now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if has_request_context():
            log_entry['method'] = request.method
            log_entry['path'] = request.path

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry)


def setup_logging():
    """Configure root logging: rotating JSON file plus a plain console handler.

    LOG_LEVEL sets the level and LOG_DIR the directory of checklist_backend.log.
    """
    log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logs_dir = os.getenv('LOG_DIR') or os.path.join(os.path.dirname(__file__), '..', 'logs')
    os.makedirs(logs_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    log_file = os.path.join(logs_dir, 'checklist_backend.log')
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(StructuredFormatter())

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)-8s %(name)-20s %(message)s'
    ))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    for noisy in ('werkzeug', 'sqlalchemy.engine', 'urllib3', 'libcloud'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info("Logging initialized", extra={
        'extra_fields': {
            'log_level': log_level_str,
            'log_file': log_file,
        }
    })

    return logger
