from __future__ import annotations

import logging
import sys
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"

# urllib3 logs every connection it opens; only useful when chasing a bad tenant URL.
URLLIB3_LOGGERS = ("urllib3.connection", "urllib3.connectionpool")


def urllib3_level(level: Optional[int]) -> int:
    """urllib3 is silenced below WARNING unless the CLI runs with -vv."""
    if level is not None and level <= logging.DEBUG:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(level: Optional[int]) -> None:
    """Send log records to stderr so they never mix with menu output on stdout.

    `level` is None (WARNING), INFO for -v or DEBUG for -vv. Calling it again
    only changes the levels.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
        root.addHandler(handler)
    root.setLevel(logging.WARNING if level is None else level)

    for name in URLLIB3_LOGGERS:
        logging.getLogger(name).setLevel(urllib3_level(level))
