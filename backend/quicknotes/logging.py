"""
Logging configuration for the Quick Notes client.
"""

import logging
import sys

# Per-request chatter from the HTTP client and the realtime channel.
_NOISY_LOGGERS = ('httpx', 'httpcore', 'socketio', 'engineio')


def setup_logging(debug: bool = False) -> logging.Logger:
    """
    Configure application logging.

    Third-party transport loggers are held at WARNING unless ``debug`` is set.

    :param debug: Emit DEBUG records and keep transport loggers verbose
    :type debug: bool
    :return: Root logger for the notes client
    :rtype: logging.Logger
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    return logging.getLogger('quicknotes')


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``quicknotes`` namespace, e.g. ``services.remote``."""
    return logging.getLogger(f'quicknotes.{name}')
