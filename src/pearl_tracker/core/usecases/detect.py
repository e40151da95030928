from __future__ import annotations

from ..domain.models import DetectionRequest, DetectionResult
from ..services import DetectionOrchestrator


class DetectUseCase:
    """Use case for checking one URL against one source.

    Thin layer that validates the request and delegates to the orchestrator.
    """

    def __init__(self, *, orchestrator: DetectionOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def execute(self, request: DetectionRequest) -> DetectionResult:
        """Run detection.

        Raises:
            InvalidRequestError: If the request has no URL
        """
        return await self._orchestrator.detect(request.validate())
