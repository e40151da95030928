from __future__ import annotations

import asyncio

import httpx

from ..core.domain.catalog import WAYBACK_MACHINE
from ..core.domain.models import (
    ContentType,
    DetectionRecord,
    DetectionRequest,
    OutcomeStatus,
    SourceOutcome,
)
from ..core.ports import LoggerPort
from .http import HttpClientFactory


MODEL_NAME = "Internet Archive"
TIMEOUT_NOTE = "API timeout - try again later"


class WaybackClient:
    """Counts archived snapshots of a URL in the Wayback Machine CDX index."""

    def __init__(
        self,
        *,
        http: HttpClientFactory,
        logger: LoggerPort,
        api_url: str = "https://web.archive.org/cdx/search/cdx",
        limit: int = 1000,
        timeout: float = 20.0,
        source_id: str = WAYBACK_MACHINE,
    ) -> None:
        self._http = http
        self._logger = logger
        self._api_url = api_url
        self._limit = limit
        self._timeout = timeout
        self._source_id = source_id

    async def detect(self, request: DetectionRequest) -> SourceOutcome:
        params = {"url": request.url, "output": "json", "limit": str(self._limit)}
        self._logger.info("querying_snapshots", url=request.url, api_url=self._api_url)

        try:
            async with self._http() as client:
                response = await asyncio.wait_for(
                    client.get(self._api_url, params=params),
                    timeout=self._timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            self._logger.error("snapshot_timeout", url=request.url, timeout=self._timeout)
            record = DetectionRecord(
                model_name=MODEL_NAME,
                content_type=ContentType.URL,
                confidence=0,
                source=TIMEOUT_NOTE,
            )
            return SourceOutcome(
                source_id=self._source_id,
                status=OutcomeStatus.TRANSIENT_FAILURE,
                records=(record,),
                detail="timeout",
            )
        except httpx.HTTPError as exc:
            self._logger.error("snapshot_request_failed", url=request.url, error=str(exc))
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.TRANSIENT_FAILURE, str(exc))

        if not response.is_success:
            self._logger.warning("snapshot_unexpected_status", status=response.status_code)
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.NO_DATA, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            self._logger.warning("snapshot_malformed_payload", url=request.url)
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.NO_DATA, "malformed payload")

        # First row of the CDX JSON output is the field-name header.
        count = max(0, len(payload) - 1) if isinstance(payload, list) else 0
        self._logger.info("snapshots_counted", url=request.url, snapshots=count)

        if count == 0:
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.NO_DATA)

        record = DetectionRecord(
            model_name=MODEL_NAME,
            content_type=ContentType.URL,
            confidence=count,
            source=f"{count} archived snapshots",
        )
        return SourceOutcome.found(self._source_id, record)
