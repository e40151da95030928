from __future__ import annotations

from .detection_orchestrator import DetectionOrchestrator
from . import repo_matching

__all__ = [
    "DetectionOrchestrator",
    "repo_matching",
]
