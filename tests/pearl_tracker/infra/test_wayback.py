"""Tests for WaybackClient against a faked CDX service."""
import asyncio

import httpx
import pytest

from pearl_tracker.core.domain.catalog import WAYBACK_MACHINE
from pearl_tracker.core.domain.models import ContentType, DetectionRequest, OutcomeStatus
from pearl_tracker.infra.http import HttpClientFactory
from pearl_tracker.infra.wayback import WaybackClient

from helpers import FakeLogger, RecordingTransport


REQUEST = DetectionRequest(url="https://example.com/page", source=WAYBACK_MACHINE)
HEADER = ["urlkey", "timestamp", "original", "mimetype", "statuscode", "digest", "length"]


def _client(handler, timeout: float = 20.0):
    transport = RecordingTransport(handler)
    logger = FakeLogger()
    client = WaybackClient(http=HttpClientFactory(transport=transport), logger=logger, timeout=timeout)
    return client, transport, logger


@pytest.mark.asyncio
async def test_counts_rows_minus_header():
    rows = [HEADER] + [["com,example)/page", f"2020010100000{i}"] for i in range(5)]
    client, transport, _ = _client(lambda r: httpx.Response(200, json=rows))

    outcome = await client.detect(REQUEST)

    assert outcome.status is OutcomeStatus.FOUND
    record = outcome.records[0]
    assert record.model_name == "Internet Archive"
    assert record.content_type is ContentType.URL
    assert record.confidence == 5
    assert record.source == "5 archived snapshots"

    request = transport.requests[0]
    assert request.url.host == "web.archive.org"
    assert request.url.path == "/cdx/search/cdx"
    assert request.url.params["url"] == "https://example.com/page"
    assert request.url.params["limit"] == "1000"
    assert request.url.params["output"] == "json"


@pytest.mark.asyncio
async def test_header_only_or_empty_payload_yields_nothing():
    for payload in ([HEADER], [], {"unexpected": "object"}):
        client, _, _ = _client(lambda r, p=payload: httpx.Response(200, json=p))
        outcome = await client.detect(REQUEST)
        assert outcome.records == ()
        assert outcome.status is OutcomeStatus.NO_DATA


@pytest.mark.asyncio
async def test_error_status_yields_nothing():
    client, _, logger = _client(lambda r: httpx.Response(502))

    outcome = await client.detect(REQUEST)

    assert outcome.records == ()
    assert outcome.detail == "HTTP 502"
    assert "snapshot_unexpected_status" in logger.messages("warning")


@pytest.mark.asyncio
async def test_malformed_json_yields_nothing():
    client, _, _ = _client(lambda r: httpx.Response(200, text="<html>busy</html>"))

    outcome = await client.detect(REQUEST)

    assert outcome.records == ()


@pytest.mark.asyncio
async def test_timeout_returns_explicit_timeout_record():
    async def never_answers(request):
        await asyncio.sleep(10)
        return httpx.Response(200, json=[HEADER])

    client, _, logger = _client(never_answers, timeout=0.05)

    outcome = await client.detect(REQUEST)

    assert outcome.status is OutcomeStatus.TRANSIENT_FAILURE
    assert len(outcome.records) == 1
    record = outcome.records[0]
    assert record.confidence == 0
    assert "timeout" in record.source.lower()
    assert "try again later" in record.source
    assert "snapshot_timeout" in logger.messages("error")


@pytest.mark.asyncio
async def test_connection_error_yields_nothing():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    client, _, _ = _client(refuse)

    outcome = await client.detect(REQUEST)

    assert outcome.records == ()
    assert outcome.status is OutcomeStatus.TRANSIENT_FAILURE
