"""Logging setup for the ``sesam`` command line.

Library modules only create module loggers (``sesam.security.envelope``,
``sesam.security.random_source`` and so on) and never configure handlers.
``sesam.frontend.cli.app.main`` calls :func:`configure_logging` once with
``Settings.log_level``, read from ``SESAM_LOG_LEVEL``. Log records carry
sizes and event names only, never passwords, keys or payload bytes.
"""

import logging
import sys


def configure_logging(level: int = logging.WARNING) -> None:
    """Send records at ``level`` and above to stderr.

    ``sesam open`` writes the decrypted payload to stdout, so diagnostics
    must never share that stream.
    """
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
