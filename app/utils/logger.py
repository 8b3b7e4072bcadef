# app/utils/logger.py

import logging


def get_logger(name: str) -> logging.Logger:
    """Module logger; handlers and levels come from app.core.logging."""
    return logging.getLogger(name)
