from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "pearl_tracker"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_cache_dir)


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all pearl_tracker data",
    )

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Logs directory for per-run JSONL logs."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path


class GitHubConfig(BaseSettings):
    """GitHub code search configuration."""

    token: str | None = Field(
        default=None,
        description="GitHub personal access token (required for the github-repos source)",
    )
    api_url: str = Field(default="https://api.github.com")
    per_page: int = Field(default=100, description="Search page size; a shorter page ends pagination")
    page_delay: float = Field(default=1.0, description="Seconds to wait between search pages")
    max_repositories: int = Field(default=30, description="Ranked repositories enriched per query")
    max_file_size: int = Field(default=100_000, description="Largest file (bytes) considered for content checks")


class CommonCrawlConfig(BaseSettings):
    """Common Crawl index configuration."""

    index_base_url: str = Field(default="https://index.commoncrawl.org")
    max_attempts: int = Field(default=3, description="Attempts per index when the index answers 503")
    backoff_base: float = Field(default=1.0, description="First backoff in seconds, doubled per attempt")
    request_delay: float = Field(default=0.5, description="Seconds to wait before each index query")


class WaybackConfig(BaseSettings):
    """Wayback Machine CDX configuration."""

    api_url: str = Field(default="https://web.archive.org/cdx/search/cdx")
    limit: int = Field(default=1000, description="Maximum CDX rows requested")
    timeout: float = Field(default=20.0, description="Hard timeout in seconds before the request is cancelled")


class SourcesConfig(BaseSettings):
    """Per-source enable flags. A disabled source makes no network calls."""

    common_crawl: bool = Field(default=True)
    wayback_machine: bool = Field(default=True)
    github_repos: bool = Field(default=True)


class HttpConfig(BaseSettings):
    """Shared HTTP client settings."""

    user_agent: str = Field(default="PearlTracker/1.0")
    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    logger_name: str = Field(default="pearl_tracker")
    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    console_output: bool = Field(default=False, description="Mirror logs to the console")


class RuntimeConfig(BaseSettings):
    """Per-invocation values set by the entry points."""

    run_id: str | None = Field(
        default=None,
        description="Names the JSONL log file for this run; no file is written when unset",
    )


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with PEARL_TRACKER_ prefix.
    Use double underscore for nested config: PEARL_TRACKER_GITHUB__TOKEN

    Example env vars:
        # Required for the github-repos source
        export PEARL_TRACKER_GITHUB__TOKEN=ghp_xxxxxxxxxxxxx

        # Optional (with defaults)
        export PEARL_TRACKER_SOURCES__COMMON_CRAWL=false
        export PEARL_TRACKER_WAYBACK__TIMEOUT=20
        export PEARL_TRACKER_LOGGING__LEVEL=DEBUG
        export PEARL_TRACKER_DIRECTORIES__HOME=/custom/path
    """

    model_config = SettingsConfigDict(
        env_prefix="PEARL_TRACKER_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    common_crawl: CommonCrawlConfig = Field(default_factory=CommonCrawlConfig)
    wayback: WaybackConfig = Field(default_factory=WaybackConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
