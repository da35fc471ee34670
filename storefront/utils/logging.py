"""Logging utilities."""

import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(level='INFO'):
    """Install a single stream handler on the package logger."""
    root = logging.getLogger('storefront')
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    return root


def get_logger(name):
    """Get a logger instance for the given module name."""
    return logging.getLogger(name)
