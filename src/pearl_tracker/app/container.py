from __future__ import annotations

from dependency_injector import containers, providers

from .config import AppConfig
from ..core.domain.catalog import COMMON_CRAWL, GITHUB_REPOS, WAYBACK_MACHINE, default_catalog
from ..core.services import DetectionOrchestrator
from ..core.usecases.detect import DetectUseCase
from ..core.usecases.list_sources import ListSourcesUseCase
from ..core.usecases.scan import ScanUseCase
from ..infra.common_crawl import CommonCrawlClient
from ..infra.github import GitHubRepoSearchClient
from ..infra.http import HttpClientFactory
from ..infra.logging import DetectionLogger
from ..infra.wayback import WaybackClient


class Container(containers.DeclarativeContainer):
    """DI container with Pydantic BaseSettings support."""

    config = providers.Configuration(pydantic_settings=[AppConfig()])

    catalog = providers.Singleton(default_catalog)

    http = providers.Singleton(
        HttpClientFactory,
        user_agent=config.http.user_agent,
        timeout=config.http.timeout,
    )

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        DetectionLogger,
        run_id=config.runtime.run_id,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Source clients
    common_crawl = providers.Factory(
        CommonCrawlClient,
        catalog=catalog,
        http=http,
        logger=logger,
        index_base_url=config.common_crawl.index_base_url,
        max_attempts=config.common_crawl.max_attempts,
        backoff_base=config.common_crawl.backoff_base,
        request_delay=config.common_crawl.request_delay,
    )

    wayback = providers.Factory(
        WaybackClient,
        http=http,
        logger=logger,
        api_url=config.wayback.api_url,
        limit=config.wayback.limit,
        timeout=config.wayback.timeout,
    )

    github = providers.Factory(
        GitHubRepoSearchClient,
        http=http,
        logger=logger,
        token=config.github.token,
        api_url=config.github.api_url,
        per_page=config.github.per_page,
        page_delay=config.github.page_delay,
        max_repositories=config.github.max_repositories,
        max_file_size=config.github.max_file_size,
    )

    orchestrator = providers.Factory(
        DetectionOrchestrator,
        catalog=catalog,
        clients=providers.Dict({
            COMMON_CRAWL: common_crawl,
            WAYBACK_MACHINE: wayback,
            GITHUB_REPOS: github,
        }),
        enabled=providers.Dict({
            COMMON_CRAWL: config.sources.common_crawl,
            WAYBACK_MACHINE: config.sources.wayback_machine,
            GITHUB_REPOS: config.sources.github_repos,
        }),
        logger=logger,
    )

    # Use cases
    detect_uc = providers.Factory(DetectUseCase, orchestrator=orchestrator)

    scan_uc = providers.Factory(ScanUseCase, orchestrator=orchestrator)

    list_sources_uc = providers.Factory(ListSourcesUseCase, catalog=catalog)
