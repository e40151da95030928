from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass

import httpx

from ..core.domain.catalog import COMMON_CRAWL, SourceCatalog
from ..core.domain.models import (
    ContentType,
    DetectionRecord,
    DetectionRequest,
    OutcomeStatus,
    SourceOutcome,
)
from ..core.ports import LoggerPort, Sleeper
from .http import HttpClientFactory


RETRYABLE_STATUS = 503


@dataclass(frozen=True)
class IndexCount:
    index: str
    records: int
    exhausted: bool = False


def count_records(body: str) -> int:
    """Count newline-delimited JSON objects; malformed lines are skipped."""
    count = 0
    for line in body.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except ValueError:
            continue
        if isinstance(record, dict):
            count += 1
    return count


class CommonCrawlClient:
    """Counts captures of a URL across the crawl indexes of one year."""

    def __init__(
        self,
        *,
        catalog: SourceCatalog,
        http: HttpClientFactory,
        logger: LoggerPort,
        index_base_url: str = "https://index.commoncrawl.org",
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        request_delay: float = 0.5,
        sleep: Sleeper = asyncio.sleep,
        source_id: str = COMMON_CRAWL,
    ) -> None:
        self._catalog = catalog
        self._http = http
        self._logger = logger
        self._index_base_url = index_base_url.rstrip("/")
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base
        self._request_delay = request_delay
        self._sleep = sleep
        self._source_id = source_id

    async def detect(self, request: DetectionRequest) -> SourceOutcome:
        year = request.year
        if not year:
            self._logger.error("missing_year", source_id=self._source_id)
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.MISCONFIGURED, "year is required")

        indexes = self._catalog.indexes_for(self._source_id, year)
        if not indexes:
            self._logger.info("no_indexes", source_id=self._source_id, year=year)
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.NO_DATA, f"no indexes for {year}")

        self._logger.info("checking_indexes", year=year, indexes=list(indexes))
        async with self._http() as client:
            counts = await asyncio.gather(
                *(self._query_after_delay(client, request.url, index) for index in indexes)
            )

        total = sum(c.records for c in counts)
        breakdown = [f"{c.index}: {c.records}" for c in counts if c.records > 0]
        self._logger.info("index_totals", year=year, total=total, breakdown=breakdown)

        if total == 0:
            status = OutcomeStatus.NO_DATA
            if any(c.exhausted for c in counts):
                status = OutcomeStatus.TRANSIENT_FAILURE
            return SourceOutcome.nothing(self._source_id, status)

        summary = ", ".join(breakdown)
        record = DetectionRecord(
            model_name=f"Common Crawl {year}",
            content_type=ContentType.URL,
            confidence=total,
            source=f"{total} instances across {len(breakdown)} indexes ({summary})",
        )
        return SourceOutcome.found(self._source_id, record, detail=summary)

    async def _query_after_delay(self, client: httpx.AsyncClient, url: str, index: str) -> IndexCount:
        await self._sleep(self._request_delay)
        return await self._query_index(client, url, index)

    async def _query_index(self, client: httpx.AsyncClient, url: str, index: str) -> IndexCount:
        api_url = f"{self._index_base_url}/{index}-index"
        params = {"url": url, "output": "json"}

        for attempt in range(self._max_attempts):
            try:
                response = await client.get(api_url, params=params)
            except httpx.HTTPError as exc:
                self._logger.warning("index_request_failed", index=index, attempt=attempt + 1, error=str(exc))
            else:
                if response.is_success:
                    records = count_records(response.text)
                    self._logger.debug("index_counted", index=index, records=records)
                    return IndexCount(index=index, records=records)
                if response.status_code != RETRYABLE_STATUS:
                    self._logger.warning("index_unexpected_status", index=index, status=response.status_code)
                    return IndexCount(index=index, records=0)
                self._logger.warning("index_retry", index=index, attempt=attempt + 1, status=response.status_code)

            if attempt + 1 < self._max_attempts:
                await self._sleep(self._backoff_base * (2 ** attempt))

        return IndexCount(index=index, records=0, exhausted=True)
