"""Simple logger utility: one stream handler on the "pharmacy" logger, children per area."""
import logging
import os
from typing import Optional

logger = logging.getLogger("pharmacy")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    logger.propagate = False

def get_logger(area: Optional[str] = None) -> logging.Logger:
    return logger.getChild(area) if area else logger
