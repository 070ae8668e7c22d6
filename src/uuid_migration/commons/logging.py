"""
Centralized logging.

Stdlib logging, configured in one place for the whole library. Statements are
logged at DEBUG, conversion steps at INFO.
"""

from __future__ import annotations

import logging
from functools import lru_cache


@lru_cache
def initialize_logger() -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=logging.INFO,
    )
    return logging.getLogger("uuid_migration")


logger = initialize_logger()
