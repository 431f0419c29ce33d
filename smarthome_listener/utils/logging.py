"""Logging setup for the listener.

Everything logs under the ``smarthome_listener`` namespace. With a log file
configured, records go there (keeping the terminal free for the status
panel); otherwise they go to stderr.
"""

import logging
import sys
from pathlib import Path

NAMESPACE = "smarthome_listener"

# HTTP libraries used by the Whisper and assistant clients log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "urllib3")

_configured = False


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Configure listener logging once per process.

    Args:
        level: Level for the listener's own loggers.
        log_file: Log file path; its directory is created if needed.
            None logs to stderr.
    """
    global _configured
    if _configured:
        return

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s")
    )

    listener_logger = logging.getLogger(NAMESPACE)
    listener_logger.setLevel(level)
    listener_logger.addHandler(handler)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a listener module, e.g. ``get_logger("audio.capture")``."""
    return logging.getLogger(f"{NAMESPACE}.{name}")
