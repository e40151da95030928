from __future__ import annotations

import asyncio

from .config import AppConfig
from .container import Container
from ..core.domain.catalog import SourceCatalog
from ..core.domain.models import DetectionRequest, DetectionResult


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


async def detect_async(
    url: str,
    *,
    source: str = "common-crawl",
    year: str | None = None,
    title: str | None = None,
    description: str | None = None,
    config: AppConfig | None = None,
) -> DetectionResult:
    """Check ``url`` against a single source.

    Unknown or disabled sources and remote failures yield an empty result.

    Raises:
        InvalidRequestError: If ``url`` is blank
    """
    container = _create_container(config)
    try:
        request = DetectionRequest(url=url, source=source, year=year, title=title, description=description)
        return await container.detect_uc().execute(request)
    finally:
        container.shutdown_resources()


def detect(
    url: str,
    *,
    source: str = "common-crawl",
    year: str | None = None,
    title: str | None = None,
    description: str | None = None,
    config: AppConfig | None = None,
) -> DetectionResult:
    """Blocking wrapper around :func:`detect_async`."""
    return asyncio.run(
        detect_async(url, source=source, year=year, title=title, description=description, config=config)
    )


async def scan_async(url: str, *, year: str | None = None, config: AppConfig | None = None) -> DetectionResult:
    """Check ``url`` against every enabled source concurrently."""
    container = _create_container(config)
    try:
        return await container.scan_uc().execute(url=url, year=year)
    finally:
        container.shutdown_resources()


def scan(url: str, *, year: str | None = None, config: AppConfig | None = None) -> DetectionResult:
    """Blocking wrapper around :func:`scan_async`."""
    return asyncio.run(scan_async(url, year=year, config=config))


def list_sources(config: AppConfig | None = None) -> SourceCatalog:
    """Return the static catalog of detection sources."""
    container = _create_container(config)
    try:
        return container.list_sources_uc().execute()
    finally:
        container.shutdown_resources()
