from __future__ import annotations

from .logger import DetectionLogger
from .handlers import build_json_file_handler, build_human_console_handler
from .formatters import JSONFormatter, HumanReadableFormatter

__all__ = [
    "DetectionLogger",
    "build_json_file_handler",
    "build_human_console_handler",
    "JSONFormatter",
    "HumanReadableFormatter",
]
