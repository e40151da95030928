from .app.main import detect, detect_async, scan, scan_async, list_sources

__all__ = [
    "detect",
    "detect_async",
    "scan",
    "scan_async",
    "list_sources",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
