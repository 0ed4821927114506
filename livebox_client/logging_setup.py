"""
Logging configuration for the Livebox API client.

Every module logs through the ``livebox-client`` logger.  Lines carry the
thread name because event listeners and the session keepalive run on their
own threads (``livebox-events``, ``livebox-keepalive``).
"""

import logging

import colorlog

log = logging.getLogger("livebox-client")

LOG_FORMAT = (
    "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s "
    "livebox %(threadName)s: %(message)s"
)


def _setup_logging(debug: bool = False) -> None:
    """
    Send the client's log records to stderr with colors.

    With *debug*, urllib3's connection logging is turned on as well, so the
    POSTs to ``/ws`` show up next to session renewals and event polls.
    """
    level = logging.DEBUG if debug else logging.INFO
    log.setLevel(level)
    log.handlers.clear()

    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(
        LOG_FORMAT,
        datefmt="%H:%M:%S",
        log_colors={
            "DEBUG":    "cyan",
            "INFO":     "green",
            "WARNING":  "yellow",
            "ERROR":    "red",
            "CRITICAL": "bold_red",
        },
    ))
    log.addHandler(handler)

    logging.getLogger("urllib3").setLevel(logging.DEBUG if debug else logging.WARNING)
