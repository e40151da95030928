"""Shared fixtures for app-level tests."""
import httpx
import pytest
from dependency_injector import providers

from pearl_tracker.app.config import (
    AppConfig,
    CommonCrawlConfig,
    DirectoryConfig,
    RuntimeConfig,
)
from pearl_tracker.app.container import Container
from pearl_tracker.infra.http import HttpClientFactory

from helpers import RecordingTransport


def fake_archive_handler(request: httpx.Request) -> httpx.Response:
    """Canned answers for the public archive endpoints."""
    if request.url.host == "web.archive.org":
        rows = [["urlkey", "timestamp", "original"]]
        rows += [["com,example)/", f"2024010{i}000000", "https://example.com/"] for i in range(5)]
        return httpx.Response(200, json=rows)
    if request.url.host == "index.commoncrawl.org":
        return httpx.Response(200, text='{"url": "https://example.com/"}\n{"url": "https://example.com/"}\n')
    return httpx.Response(404)


@pytest.fixture
def test_config(tmp_path) -> AppConfig:
    return AppConfig(
        directories=DirectoryConfig(home=tmp_path / "home"),
        common_crawl=CommonCrawlConfig(request_delay=0.0, backoff_base=0.0),
        runtime=RuntimeConfig(run_id="test-run"),
    )


@pytest.fixture
def fake_network(monkeypatch):
    """Route every container-built HTTP client through a recording transport."""
    transport = RecordingTransport(fake_archive_handler)

    def create_container():
        c = Container()
        c.http.override(providers.Singleton(HttpClientFactory, transport=transport))
        return c

    monkeypatch.setattr("pearl_tracker.app.main.Container", create_container)
    monkeypatch.setattr("pearl_tracker.app.cli.Container", create_container)
    return transport
