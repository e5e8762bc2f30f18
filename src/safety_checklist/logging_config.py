"""Logging configuration for the checklist client."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

CONSOLE_FORMAT = '%(asctime)s %(levelname)s %(name)-25s %(message)s'
PLAIN_FORMAT = '%(asctime)s %(levelname)-8s %(name)-25s %(message)s'
QUIET_LOGGERS = ('PIL', 'urllib3', 'sqlalchemy.engine')


class ColorFormatter(logging.Formatter):
    """Level name colored by severity."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        color = self.COLORS.get(levelname)
        if color:
            record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


def setup_logging(level=None):
    """Log to stderr so command output on stdout stays clean.

    LOG_LEVEL sets the level, LOG_COLORS=false disables colors and LOG_FILE
    adds a rotating plain-text file.
    """
    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    use_colors = os.getenv('LOG_COLORS', 'true').lower() in ('true', '1', 'yes')
    if use_colors and sys.stderr.isatty():
        console.setFormatter(ColorFormatter(CONSOLE_FORMAT))
    else:
        console.setFormatter(logging.Formatter(PLAIN_FORMAT))
    root.addHandler(console)

    log_file = os.getenv('LOG_FILE')
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024, backupCount=3)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Checklist client logging initialized (level: {level_name})")
    return root
