"""
Logging setup shared by the engine, the demo CLI and the API.
Records carry a session_id field ('-' outside a capture session).
"""

import logging
import sys
from typing import Optional

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(session_id)s] %(message)s"


class SessionIdFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "session_id"):
            record.session_id = "-"
        return True


def configure_logging(level: Optional[str] = None):
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    # Already configured: only the level changes
    for existing in root.handlers:
        if any(isinstance(f, SessionIdFilter) for f in existing.filters):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SessionIdFilter())
    root.addHandler(handler)
