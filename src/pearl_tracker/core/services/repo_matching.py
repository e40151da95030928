"""Pure matching logic for the code-host search pipeline.

Scores are heuristic weights carried over unchanged from the first version
of the tracker. They are not calibrated probabilities and should not be
extended into a scoring model.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterable, Sequence
from urllib.parse import urlsplit

from ..domain.models import DetectionType, ReferenceLocation, RepositoryMatch


METADATA_MATCH_SCORE = 0.4
MARKUP_FILE_SCORE = 0.6
CODE_MATCH_SCORE = 0.7
CONTENT_MATCH_SCORE = 0.75

CHUNK_SIZE = 100
MAX_CHUNKS = 5

CORROBORATION_EXTENSIONS = re.compile(r"\.(html|htm|jsx|tsx|js|ts|md|txt)$", re.IGNORECASE)
MARKUP_EXTENSIONS = re.compile(r"\.(html|htm|jsx|tsx)$", re.IGNORECASE)

_WHITESPACE = re.compile(r"\s+")


def url_variations(url: str) -> list[str]:
    """Search keys for ``url``: as given, host+path, host alone.

    Host forms are lowercased with a leading ``www.`` removed. Order is
    stable and duplicates are dropped.
    """
    parts = urlsplit(url.strip().lower())
    host = parts.hostname or ""
    if not host:
        return [url]
    if host.startswith("www."):
        host = host[4:]
    path = parts.path or "/"

    variations: list[str] = []
    for candidate in (url, f"{host}{path}", host):
        if candidate not in variations:
            variations.append(candidate)
    return variations


def merge_matches(
    code_matches: Iterable[RepositoryMatch],
    metadata_matches: Iterable[RepositoryMatch],
) -> list[RepositoryMatch]:
    """Deduplicate by full name, code-file matches first.

    The first code match for a repository wins. A metadata match for a
    repository already present only backfills stars, forks and language.
    """
    merged: dict[str, RepositoryMatch] = {}
    for match in code_matches:
        merged.setdefault(match.full_name, match)

    for match in metadata_matches:
        existing = merged.get(match.full_name)
        if existing is None:
            merged[match.full_name] = match
            continue
        merged[match.full_name] = replace(
            existing,
            stargazers_count=match.stargazers_count or existing.stargazers_count,
            forks_count=match.forks_count or existing.forks_count,
            language=match.language or existing.language,
        )
    return list(merged.values())


def _rank_key(match: RepositoryMatch) -> tuple[bool, bool, float, int]:
    return (
        match.reference_location is not ReferenceLocation.CODE_FILE,
        match.detection_type is not DetectionType.HTML_CONTENT,
        -match.similarity_score,
        -match.stargazers_count,
    )


def rank_matches(matches: Iterable[RepositoryMatch]) -> list[RepositoryMatch]:
    """Order: code-file references, html-content matches, score, stars."""
    return sorted(matches, key=_rank_key)


def normalize_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text.lower()).strip()


def content_chunks(normalized_html: str, size: int = CHUNK_SIZE, limit: int = MAX_CHUNKS) -> list[str]:
    """Leading fixed-width chunks of the page used as corroboration probes.

    Pages no longer than one chunk yield nothing.
    """
    if len(normalized_html) <= size:
        return []
    end = min(len(normalized_html), size * limit)
    return [normalized_html[start:start + size] for start in range(0, end, size)]


def find_chunk(normalized_text: str, chunks: Sequence[str]) -> str | None:
    for chunk in chunks:
        if chunk in normalized_text:
            return chunk
    return None


def classify_content(
    match: RepositoryMatch,
    *,
    content_hit: str | None,
    has_markup_file: bool,
) -> RepositoryMatch:
    if content_hit is not None:
        return replace(
            match,
            detection_type=DetectionType.HTML_CONTENT,
            similarity_score=CONTENT_MATCH_SCORE,
            match_context=content_hit,
        )
    if has_markup_file:
        return replace(
            match,
            detection_type=DetectionType.CODE,
            similarity_score=MARKUP_FILE_SCORE,
        )
    return match
