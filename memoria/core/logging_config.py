"""
Centralized logging configuration for the application.
"""
import logging
import sys
from typing import Optional

from memoria.core.config import Settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: Optional[Settings] = None) -> None:
    """Configure the root logger once: stdout handler, level from LOG_LEVEL."""
    if config is None:
        from memoria.core.config import settings as config

    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    if any(getattr(h, "_memoria", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._memoria = True  # type: ignore[attr-defined]
    root.addHandler(handler)
