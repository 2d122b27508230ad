from __future__ import annotations
import logging
from typing import Optional

from backend.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

def setup_logging(level: Optional[str] = None) -> None:
    level = (level or settings.log_level).upper()
    # basicConfig is a no-op when the root logger already has handlers (uvicorn, pytest)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("backend").setLevel(level)
    logging.getLogger("client").setLevel(level)
