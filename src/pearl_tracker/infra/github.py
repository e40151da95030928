from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

import httpx

from ..core.domain.catalog import GITHUB_REPOS
from ..core.domain.exceptions import MissingCredentialError
from ..core.domain.models import (
    CodeMatch,
    ContentType,
    DetectionRecord,
    DetectionRequest,
    DetectionType,
    OutcomeStatus,
    ReferenceLocation,
    RepositoryMatch,
    SourceOutcome,
)
from ..core.ports import LoggerPort, Sleeper
from ..core.services.repo_matching import (
    CODE_MATCH_SCORE,
    CORROBORATION_EXTENSIONS,
    MARKUP_EXTENSIONS,
    METADATA_MATCH_SCORE,
    classify_content,
    content_chunks,
    find_chunk,
    merge_matches,
    normalize_text,
    rank_matches,
    url_variations,
)
from .http import HttpClientFactory


TOKEN_SETTING = "PEARL_TRACKER_GITHUB__TOKEN"


def code_hit_to_match(item: dict[str, Any], api_url: str) -> RepositoryMatch | None:
    """Convert one ``search/code`` item into a code-file match."""
    repo = item.get("repository") or {}
    full_name = repo.get("full_name")
    if not full_name:
        return None
    path = item.get("path") or ""
    return RepositoryMatch(
        full_name=full_name,
        html_url=repo.get("html_url") or "",
        api_url=repo.get("url") or f"{api_url}/repos/{full_name}",
        similarity_score=CODE_MATCH_SCORE,
        detection_type=DetectionType.URL_MENTION,
        reference_location=ReferenceLocation.CODE_FILE,
        match_context=f"Found in {path}",
        code_match=CodeMatch(path=path, html_url=item.get("html_url") or ""),
    )


def repo_hit_to_match(item: dict[str, Any], api_url: str) -> RepositoryMatch | None:
    """Convert one ``search/repositories`` item into a metadata match."""
    full_name = item.get("full_name")
    if not full_name:
        return None
    return RepositoryMatch(
        full_name=full_name,
        html_url=item.get("html_url") or "",
        api_url=item.get("url") or f"{api_url}/repos/{full_name}",
        similarity_score=METADATA_MATCH_SCORE,
        detection_type=DetectionType.URL_MENTION,
        reference_location=ReferenceLocation.REPO_METADATA,
        match_context="Found in repository metadata",
        stargazers_count=item.get("stargazers_count") or 0,
        forks_count=item.get("forks_count") or 0,
        language=item.get("language") or "",
    )


def _is_file(entry: dict[str, Any]) -> bool:
    return entry.get("type") == "file"


def _reported(details: dict[str, Any], key: str, fallback: int) -> int:
    """Detail value for ``key`` when the API sent one, including zero."""
    value = details.get(key)
    return fallback if value is None else value


class GitHubRepoSearchClient:
    """Finds GitHub repositories that reference a URL or embed its content.

    Pipeline: search every URL variant in repository metadata and in code,
    merge and rank the hits, then enrich the top repositories with their
    details and a content check against the live page.
    """

    def __init__(
        self,
        *,
        http: HttpClientFactory,
        logger: LoggerPort,
        token: str | None,
        api_url: str = "https://api.github.com",
        per_page: int = 100,
        page_delay: float = 1.0,
        max_repositories: int = 30,
        max_file_size: int = 100_000,
        sleep: Sleeper = asyncio.sleep,
        source_id: str = GITHUB_REPOS,
    ) -> None:
        self._http = http
        self._logger = logger
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._per_page = per_page
        self._page_delay = page_delay
        self._max_repositories = max_repositories
        self._max_file_size = max_file_size
        self._sleep = sleep
        self._source_id = source_id

    async def detect(self, request: DetectionRequest) -> SourceOutcome:
        try:
            token = self._require_token()
        except MissingCredentialError as exc:
            self._logger.error("missing_credential", source_id=self._source_id, setting=exc.setting)
            return SourceOutcome.nothing(self._source_id, OutcomeStatus.MISCONFIGURED, str(exc))

        variations = url_variations(request.url)
        self._logger.info("search_variations", variations=variations)

        async with self._http(self._api_headers(token)) as api, self._http() as web:
            ranked = await self._search_all(api, variations)
            if not ranked:
                return SourceOutcome.nothing(self._source_id, OutcomeStatus.NO_DATA)

            page_html = await self._fetch_page(web, request.url)
            chunks = content_chunks(page_html) if page_html else []
            enriched = await asyncio.gather(
                *(self._enrich(api, match, page_html, chunks) for match in ranked[: self._max_repositories])
            )

        repositories: list[RepositoryMatch] = []
        seen: set[str] = set()
        for match in enriched:
            if match is None or match.full_name in seen:
                continue
            seen.add(match.full_name)
            repositories.append(match)

        self._logger.info("repositories_enriched", candidates=len(ranked), kept=len(repositories))

        record = DetectionRecord(
            model_name="Github Repositories",
            content_type=ContentType.CODE,
            confidence=len(repositories),
            source=f"{len(repositories)} related repositories",
            repositories=tuple(repositories),
        )
        return SourceOutcome.found(self._source_id, record)

    def _require_token(self) -> str:
        if not self._token:
            raise MissingCredentialError(self._source_id, TOKEN_SETTING)
        return self._token

    @staticmethod
    def _api_headers(token: str) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"Bearer {token}",
        }

    async def _search_all(self, api: httpx.AsyncClient, variations: list[str]) -> list[RepositoryMatch]:
        results = await asyncio.gather(
            *(self._search(api, "repositories", v) for v in variations),
            *(self._search(api, "code", v) for v in variations),
        )
        middle = len(variations)
        repo_items = [item for batch in results[:middle] for item in batch]
        code_items = [item for batch in results[middle:] for item in batch]
        self._logger.info("search_hits", repositories=len(repo_items), code=len(code_items))

        code_matches = [m for m in (code_hit_to_match(i, self._api_url) for i in code_items) if m is not None]
        metadata_matches = [m for m in (repo_hit_to_match(i, self._api_url) for i in repo_items) if m is not None]
        return rank_matches(merge_matches(code_matches, metadata_matches))

    async def _search(self, api: httpx.AsyncClient, kind: str, variation: str) -> list[dict[str, Any]]:
        """Collect every page of one search; a failed page ends the search."""
        url = f"{self._api_url}/search/{kind}"
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            params = {"q": f'"{variation}"', "per_page": self._per_page, "page": page}
            try:
                response = await api.get(url, params=params)
            except httpx.HTTPError as exc:
                self._logger.warning("search_page_failed", kind=kind, variation=variation, page=page, error=str(exc))
                break
            if not response.is_success:
                self._logger.warning(
                    "search_page_failed", kind=kind, variation=variation, page=page, status=response.status_code
                )
                break
            try:
                payload = response.json()
            except ValueError:
                self._logger.warning("search_page_failed", kind=kind, variation=variation, page=page, error="invalid json")
                break

            batch = payload.get("items") if isinstance(payload, dict) else None
            batch = [item for item in (batch or []) if isinstance(item, dict)]
            items.extend(batch)
            if len(batch) < self._per_page:
                break
            page += 1
            await self._sleep(self._page_delay)
        return items

    async def _fetch_page(self, web: httpx.AsyncClient, url: str) -> str:
        try:
            response = await web.get(url)
        except httpx.HTTPError as exc:
            self._logger.warning("page_fetch_failed", url=url, error=str(exc))
            return ""
        if not response.is_success:
            self._logger.warning("page_fetch_failed", url=url, status=response.status_code)
            return ""
        return normalize_text(response.text)

    async def _enrich(
        self,
        api: httpx.AsyncClient,
        match: RepositoryMatch,
        page_html: str,
        chunks: list[str],
    ) -> RepositoryMatch | None:
        try:
            response = await api.get(match.api_url)
            if not response.is_success:
                self._logger.warning("repository_dropped", full_name=match.full_name, status=response.status_code)
                return None
            details = response.json()

            files = await self._list_files(api, match.api_url)
            candidates = [f for f in files if _is_file(f) and (f.get("size") or 0) < self._max_file_size]

            corroborated = match
            if page_html and files:
                probes = [f for f in candidates if CORROBORATION_EXTENSIONS.search(f.get("html_url") or "")]
                hits = await asyncio.gather(*(self._probe_file(api, f, chunks) for f in probes)) if chunks else []
                content_hit = next((hit for hit in hits if hit is not None), None)
                has_markup_file = any(
                    _is_file(f) and MARKUP_EXTENSIONS.search(f.get("html_url") or "") for f in files
                )
                corroborated = classify_content(match, content_hit=content_hit, has_markup_file=has_markup_file)

            return replace(
                corroborated,
                full_name=details.get("full_name") or match.full_name,
                html_url=details.get("html_url") or match.html_url,
                stargazers_count=_reported(details, "stargazers_count", match.stargazers_count),
                forks_count=_reported(details, "forks_count", match.forks_count),
                language=details.get("language") or match.language,
                file_links=tuple(f["html_url"] for f in candidates if f.get("html_url")),
            )
        except Exception as exc:
            self._logger.warning("repository_dropped", full_name=match.full_name, error=repr(exc))
            return None

    async def _list_files(self, api: httpx.AsyncClient, repo_api_url: str) -> list[dict[str, Any]]:
        response = await api.get(f"{repo_api_url}/contents")
        if not response.is_success:
            return []
        payload = response.json()
        if not isinstance(payload, list):
            return []
        return [entry for entry in payload if isinstance(entry, dict)]

    async def _probe_file(self, api: httpx.AsyncClient, entry: dict[str, Any], chunks: list[str]) -> str | None:
        """First page chunk found in the file's text, if any."""
        url = entry.get("download_url") or entry.get("html_url")
        if not url:
            return None
        try:
            response = await api.get(url)
        except httpx.HTTPError as exc:
            self._logger.debug("file_fetch_failed", url=url, error=str(exc))
            return None
        if not response.is_success:
            return None
        return find_chunk(normalize_text(response.text), chunks)
