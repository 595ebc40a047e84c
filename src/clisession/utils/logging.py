"""Logging setup for clisession processes.

Every module logs under the ``clisession`` namespace (session lifecycle
in ``clisession.session.session``, expiration in ``clisession.registry``,
HTTP traffic in ``clisession.http_bridge``), so one logger configures
the whole server.
"""

from __future__ import annotations

import logging
import sys

from clisession.config.settings import LoggingConfig

PACKAGE_LOGGER = "clisession"


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Attach handlers to the ``clisession`` logger.

    Output goes to stderr and, when ``config.file`` is set, to that file as
    well. Both ``serve`` and ``http`` entry points call this once at
    startup; a repeated call replaces the handlers it installed before
    rather than duplicating every line.

    Args:
        config: Logging section of the settings. Defaults to INFO on stderr.
    """
    config = config or LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug(
        "Logging to %s at %s", config.file or "stderr", config.level.upper()
    )
