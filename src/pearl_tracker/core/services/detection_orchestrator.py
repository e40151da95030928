from __future__ import annotations

import asyncio
from typing import Mapping

from ..domain.catalog import SourceCatalog
from ..domain.exceptions import MissingYearError, UnknownSourceError
from ..domain.models import (
    DetectionRequest,
    DetectionResult,
    DetectionSource,
    OutcomeStatus,
    SourceOutcome,
)
from ..ports import LoggerPort, SourceClientPort


class DetectionOrchestrator:
    """Routes detection requests to source clients.

    Every public entry point returns a well-formed result: unknown or
    misconfigured sources, disabled sources and client failures all end up
    as an empty record list, with the reason kept on ``SourceOutcome``.
    """

    def __init__(
        self,
        *,
        catalog: SourceCatalog,
        clients: Mapping[str, SourceClientPort],
        enabled: Mapping[str, bool],
        logger: LoggerPort,
    ) -> None:
        self._catalog = catalog
        self._clients = dict(clients)
        self._enabled = dict(enabled)
        self._logger = logger

    def sources(self) -> SourceCatalog:
        return self._catalog

    def is_enabled(self, source_id: str) -> bool:
        return self._enabled.get(source_id, False)

    async def evaluate(self, request: DetectionRequest) -> SourceOutcome:
        """Query exactly one source and report why it produced what it did."""
        source_id = request.source
        try:
            source = self._resolve(request)
        except UnknownSourceError as exc:
            self._logger.error("unknown_source", source_id=source_id)
            return SourceOutcome.nothing(source_id, OutcomeStatus.MISCONFIGURED, str(exc))

        if not self.is_enabled(source.id):
            self._logger.info("source_disabled", source_id=source.id)
            return SourceOutcome.nothing(source.id, OutcomeStatus.DISABLED)

        try:
            self._require_year(source, request)
        except MissingYearError as exc:
            self._logger.error("missing_year", source_id=source.id)
            return SourceOutcome.nothing(source.id, OutcomeStatus.MISCONFIGURED, str(exc))

        self._logger.info("detection_started", source_id=source.id, url=request.url, year=request.year)
        try:
            outcome = await self._clients[source.id].detect(request)
        except Exception as exc:
            self._logger.exception("source_failed", source_id=source.id, error=repr(exc))
            return SourceOutcome.nothing(source.id, OutcomeStatus.ERROR, repr(exc))

        self._logger.info(
            "detection_finished",
            source_id=source.id,
            status=outcome.status.value,
            records=len(outcome.records),
        )
        return outcome

    async def detect(self, request: DetectionRequest) -> DetectionResult:
        outcome = await self.evaluate(request)
        return DetectionResult.of(outcome.records)

    async def scan(self, url: str, year: str | None = None) -> DetectionResult:
        """Run every enabled source for ``url`` and merge the records.

        Partitioned sources use ``year`` when it is one of their sub-options,
        otherwise their first sub-option.
        """
        requests = [
            DetectionRequest(url=url, source=source.id, year=self._pick_year(source, year))
            for source in self._catalog
            if self.is_enabled(source.id)
        ]
        outcomes = await asyncio.gather(*(self.evaluate(r) for r in requests))
        return DetectionResult.of(record for outcome in outcomes for record in outcome.records)

    def _resolve(self, request: DetectionRequest) -> DetectionSource:
        source = self._catalog.get(request.source)
        if source is None or request.source not in self._clients:
            raise UnknownSourceError(request.source)
        return source

    @staticmethod
    def _require_year(source: DetectionSource, request: DetectionRequest) -> None:
        if source.has_sub_options and not request.year:
            raise MissingYearError(source.id)

    @staticmethod
    def _pick_year(source: DetectionSource, year: str | None) -> str | None:
        if not source.has_sub_options:
            return None
        if year and year in source.sub_options:
            return year
        return source.default_sub_option
