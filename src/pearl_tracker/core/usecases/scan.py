from __future__ import annotations

from ..domain.models import DetectionRequest, DetectionResult
from ..services import DetectionOrchestrator


class ScanUseCase:
    """Use case for checking one URL against every enabled source."""

    def __init__(self, *, orchestrator: DetectionOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def execute(self, *, url: str, year: str | None = None) -> DetectionResult:
        DetectionRequest(url=url).validate()
        return await self._orchestrator.scan(url, year=year)
