"""
Explicit one-time process setup for entry points (CLI, API server).
Library modules never configure logging on import.
"""
import logging
import os

from dotenv import load_dotenv

LOG_FORMAT = '%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s'
LOG_DATEFMT = '%H:%M:%S'

_configured = False


def configure_logging(level: str = None) -> None:
    """Load .env and set up the root logger.  Later calls are no-ops."""
    global _configured
    if _configured:
        return

    load_dotenv()
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    _configured = True
