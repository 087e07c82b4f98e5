"""
CENTRAL LOGGING UTILITY
----------------------

One logger configuration shared by the UI, the API and the charting
pipeline.

Conventions:
- Messages carry a bracketed component tag: [ingest], [chart], [db],
  [species], [auth]
- Level comes from LOG_LEVEL (default INFO)
- Handlers are attached once per logger name
"""

import logging
import os
from typing import Optional

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Return a logger writing to stderr with the shared format.

    Calling this repeatedly for the same name never stacks handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or DEFAULT_LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

        # Keep records out of the root logger (uvicorn/streamlit attach their own)
        logger.propagate = False

    return logger
