"""Logging setup shared by the CLI and the engine."""

import logging
import os
import re
import sys
from typing import Optional

MASK = '***MASKED***'

# Keys whose values never reach a log line: credentials, OTP codes and share tokens.
SENSITIVE_KEYS = ('password', 'otp', r'api[_-]?key', 'token', 'authorization', 'secret')


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials, OTP codes and tokens in log records."""

    PATTERNS = [
        (re.compile(rf'({key}["\']?\s*[:=]\s*["\']?)([^"\'}}\s,]+)', re.IGNORECASE), rf'\1{MASK}')
        for key in SENSITIVE_KEYS
    ] + [
        (re.compile(r'(bearer\s+)([^\s,}\'\"]+)', re.IGNORECASE), rf'\1{MASK}'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive data in the message and its arguments."""
        record.msg = self._mask_value(record.msg)

        if isinstance(record.args, dict):
            record.args = {k: self._mask_value(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._mask_value(arg) for arg in record.args)

        return True

    def _mask_value(self, value):
        if not isinstance(value, str):
            return value
        for pattern, replacement in self.PATTERNS:
            value = pattern.sub(replacement, value)
        return value


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Handlers are installed on the component logger and on the ``engine``
    logger so library modules log through the same stream.

    Args:
        component_name: Name of the component (e.g., 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    for name in (component_name, 'engine', 'common'):
        _configure_logger(logging.getLogger(name), level)

    return logger


def _configure_logger(logger: logging.Logger, level: int) -> None:
    """Attach a masking stdout handler to a logger once."""
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
