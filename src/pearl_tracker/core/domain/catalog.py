from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .models import ContentType, DetectionSource, SourceCategory, SourceType


COMMON_CRAWL = "common-crawl"
WAYBACK_MACHINE = "wayback-machine"
GITHUB_REPOS = "github-repos"


def parse_index_list(value: str) -> tuple[str, ...]:
    """Split a comma-joined list of index identifiers, dropping blanks."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


class SourceCatalog:
    """Immutable, ordered catalog of detection sources.

    Built once at startup and handed to whatever needs it; nothing mutates
    it afterwards.
    """

    def __init__(self, sources: Iterable[DetectionSource]) -> None:
        by_id: dict[str, DetectionSource] = {}
        for source in sources:
            if source.id in by_id:
                raise ValueError(f"Duplicate source id: {source.id}")
            by_id[source.id] = source
        self._sources: Mapping[str, DetectionSource] = MappingProxyType(by_id)

    def __iter__(self) -> Iterator[DetectionSource]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    def get(self, source_id: str) -> DetectionSource | None:
        return self._sources.get(source_id)

    def ids(self) -> list[str]:
        return list(self._sources)

    def indexes_for(self, source_id: str, key: str) -> tuple[str, ...]:
        """Index identifiers behind ``key`` for ``source_id``; empty if unknown."""
        source = self._sources.get(source_id)
        if source is None:
            return ()
        return source.sub_options.get(key, ())


def default_catalog() -> SourceCatalog:
    return SourceCatalog(
        [
            DetectionSource(
                id=COMMON_CRAWL,
                name="Common Crawl",
                description="Searches historical web archives for model training data",
                type=SourceType.DATASET,
                category=SourceCategory.CRAWLERS,
                content_type=ContentType.URL,
                sub_options={
                    "2025": parse_index_list("CC-MAIN-2025-18"),
                    "2024": parse_index_list(
                        "CC-MAIN-2024-51,CC-MAIN-2024-46,CC-MAIN-2024-42,CC-MAIN-2024-38,"
                        "CC-MAIN-2024-33,CC-MAIN-2024-26,CC-MAIN-2024-22,CC-MAIN-2024-18,"
                        "CC-MAIN-2024-10"
                    ),
                },
            ),
            DetectionSource(
                id=WAYBACK_MACHINE,
                name="Internet Archive",
                description="Historical snapshots of websites",
                type=SourceType.ARCHIVE,
                category=SourceCategory.CRAWLERS,
                content_type=ContentType.URL,
            ),
            DetectionSource(
                id=GITHUB_REPOS,
                name="Github Repos",
                description="Code Repositories from Github",
                type=SourceType.ARCHIVE,
                category=SourceCategory.CODE,
                content_type=ContentType.CODE,
            ),
        ]
    )
