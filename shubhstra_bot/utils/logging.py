"""
Logging helpers.
"""

import logging
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    global _configured
    if _configured:
        logging.getLogger().setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=_FORMAT)
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``shubhstra`` namespace."""
    if not name:
        return logging.getLogger("shubhstra")
    if name == "shubhstra" or name.startswith("shubhstra."):
        return logging.getLogger(name)
    return logging.getLogger(f"shubhstra.{name}")
