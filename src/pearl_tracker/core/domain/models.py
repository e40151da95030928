from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .exceptions import InvalidRequestError


class SourceType(str, Enum):
    DATASET = "dataset"
    ARCHIVE = "archive"
    SEARCH = "search"
    SOCIAL = "social"


class SourceCategory(str, Enum):
    CRAWLERS = "crawlers"
    CODE = "code"
    SOCIAL = "social"


class ContentType(str, Enum):
    URL = "url"
    HTML = "html"
    CSS = "css"
    JAVASCRIPT = "javascript"
    TEXT = "text"
    IMAGES = "images"
    CODE = "code"


class DetectionType(str, Enum):
    URL_MENTION = "url_mention"
    HTML_CONTENT = "html_content"
    CODE = "code"


class ReferenceLocation(str, Enum):
    REPO_METADATA = "repo_metadata"
    CODE_FILE = "code_file"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DetectionSource:
    """Static descriptor of one third-party data source.

    ``sub_options`` maps a caller-facing key (e.g. a year) to the underlying
    index identifiers queried for it. The mapping is wrapped read-only.
    """
    id: str
    name: str
    description: str
    type: SourceType
    category: SourceCategory
    content_type: ContentType
    sub_options: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {key: tuple(value) for key, value in self.sub_options.items()}
        object.__setattr__(self, "sub_options", MappingProxyType(frozen))

    @property
    def has_sub_options(self) -> bool:
        return bool(self.sub_options)

    @property
    def default_sub_option(self) -> str | None:
        """First declared sub-option key, used when a caller picks none."""
        return next(iter(self.sub_options), None)


@dataclass(frozen=True)
class CodeMatch:
    path: str
    html_url: str


@dataclass(frozen=True)
class RepositoryMatch:
    """One repository correlated with the queried URL.

    Refinements (stars, language, corroboration) are applied with
    ``dataclasses.replace`` so ``full_name`` and ``api_url`` never change
    on an existing value.
    """
    full_name: str
    html_url: str
    api_url: str
    similarity_score: float
    detection_type: DetectionType
    reference_location: ReferenceLocation
    match_context: str = ""
    file_links: tuple[str, ...] = ()
    stargazers_count: int = 0
    forks_count: int = 0
    language: str = ""
    code_match: CodeMatch | None = None


@dataclass(frozen=True)
class DetectionRecord:
    """One source's aggregated finding for one query.

    ``confidence`` is a raw count of matches, not a probability.
    """
    model_name: str
    content_type: ContentType
    confidence: int
    source: str
    last_detected: datetime = field(default_factory=utcnow)
    repositories: tuple[RepositoryMatch, ...] | None = None


@dataclass(frozen=True)
class CopycatSite:
    url: str
    similarity_score: float
    copied_features: tuple[str, ...] = ()
    detection_method: str = ""
    screenshot: str | None = None


@dataclass(frozen=True)
class DetectionResult:
    ai_models: tuple[DetectionRecord, ...]
    copycat_sites: tuple[CopycatSite, ...] = ()
    analysis_complete: bool = True
    last_analyzed: datetime = field(default_factory=utcnow)

    @classmethod
    def empty(cls) -> "DetectionResult":
        return cls(ai_models=())

    @classmethod
    def of(cls, records) -> "DetectionResult":
        return cls(ai_models=tuple(records))


@dataclass(frozen=True)
class DetectionRequest:
    """Inbound query.

    ``title`` and ``description`` are accepted for callers that carry page
    metadata; detection itself only uses ``url``, ``source`` and ``year``.
    """
    url: str
    source: str = "common-crawl"
    year: str | None = None
    title: str | None = None
    description: str | None = None

    def validate(self) -> "DetectionRequest":
        if not self.url or not self.url.strip():
            raise InvalidRequestError("URL is required")
        return self


class OutcomeStatus(str, Enum):
    FOUND = "found"
    NO_DATA = "no_data"
    DISABLED = "disabled"
    TRANSIENT_FAILURE = "transient_failure"
    MISCONFIGURED = "misconfigured"
    ERROR = "error"


@dataclass(frozen=True)
class SourceOutcome:
    """Internal result of querying one source.

    Keeps the reason a source produced nothing visible to logs and tests,
    while ``records`` is all that crosses the external boundary.
    """
    source_id: str
    status: OutcomeStatus
    records: tuple[DetectionRecord, ...] = ()
    detail: str | None = None

    @classmethod
    def found(cls, source_id: str, record: DetectionRecord, detail: str | None = None) -> "SourceOutcome":
        return cls(source_id=source_id, status=OutcomeStatus.FOUND, records=(record,), detail=detail)

    @classmethod
    def nothing(cls, source_id: str, status: OutcomeStatus, detail: str | None = None) -> "SourceOutcome":
        return cls(source_id=source_id, status=status, detail=detail)
