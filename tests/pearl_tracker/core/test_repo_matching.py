"""Tests for the pure matching helpers of the code-host pipeline."""
from dataclasses import replace

from pearl_tracker.core.domain.models import (
    CodeMatch,
    DetectionType,
    ReferenceLocation,
    RepositoryMatch,
)
from pearl_tracker.core.services.repo_matching import (
    CODE_MATCH_SCORE,
    CONTENT_MATCH_SCORE,
    MARKUP_FILE_SCORE,
    METADATA_MATCH_SCORE,
    classify_content,
    content_chunks,
    find_chunk,
    merge_matches,
    normalize_text,
    rank_matches,
    url_variations,
)


def _code(name: str, path: str = "index.html", stars: int = 0) -> RepositoryMatch:
    return RepositoryMatch(
        full_name=name,
        html_url=f"https://github.com/{name}",
        api_url=f"https://api.github.com/repos/{name}",
        similarity_score=CODE_MATCH_SCORE,
        detection_type=DetectionType.URL_MENTION,
        reference_location=ReferenceLocation.CODE_FILE,
        match_context=f"Found in {path}",
        stargazers_count=stars,
        code_match=CodeMatch(path=path, html_url=f"https://github.com/{name}/blob/main/{path}"),
    )


def _meta(name: str, stars: int = 0, forks: int = 0, language: str = "") -> RepositoryMatch:
    return RepositoryMatch(
        full_name=name,
        html_url=f"https://github.com/{name}",
        api_url=f"https://api.github.com/repos/{name}",
        similarity_score=METADATA_MATCH_SCORE,
        detection_type=DetectionType.URL_MENTION,
        reference_location=ReferenceLocation.REPO_METADATA,
        match_context="Found in repository metadata",
        stargazers_count=stars,
        forks_count=forks,
        language=language,
    )


def test_url_variations_full_url():
    assert url_variations("https://www.Example.com/Page") == [
        "https://www.Example.com/Page",
        "example.com/page",
        "example.com",
    ]


def test_url_variations_root_url_keeps_slash_path():
    assert url_variations("https://example.com") == [
        "https://example.com",
        "example.com/",
        "example.com",
    ]


def test_url_variations_without_scheme_falls_back_to_input():
    assert url_variations("example.com/page") == ["example.com/page"]


def test_merge_prefers_code_match_and_backfills_metadata():
    merged = merge_matches(
        [_code("acme/site"), _code("acme/site", path="other.js")],
        [_meta("acme/site", stars=42, forks=7, language="HTML"), _meta("someone/else", stars=3)],
    )

    assert [m.full_name for m in merged] == ["acme/site", "someone/else"]
    site = merged[0]
    assert site.reference_location is ReferenceLocation.CODE_FILE
    assert site.similarity_score == CODE_MATCH_SCORE
    assert site.match_context == "Found in index.html"
    assert site.code_match.path == "index.html"
    assert (site.stargazers_count, site.forks_count, site.language) == (42, 7, "HTML")
    assert merged[1].similarity_score == METADATA_MATCH_SCORE


def test_merge_backfill_never_clears_existing_values():
    first = _meta("acme/site", stars=10, language="Go")
    merged = merge_matches([], [first, _meta("acme/site", stars=0, language="")])

    assert len(merged) == 1
    assert merged[0].stargazers_count == 10
    assert merged[0].language == "Go"


def test_merged_names_are_unique():
    merged = merge_matches(
        [_code("a/x"), _code("b/y"), _code("a/x")],
        [_meta("b/y"), _meta("c/z"), _meta("c/z")],
    )
    names = [m.full_name for m in merged]
    assert len(names) == len(set(names)) == 3


def test_rank_code_file_before_metadata_regardless_of_score():
    a = _code("a/code")
    a = replace(a, similarity_score=0.5)
    b = _meta("b/meta")
    b = replace(b, similarity_score=0.9)

    assert [m.full_name for m in rank_matches([b, a])] == ["a/code", "b/meta"]


def test_rank_tie_breaks():
    html = classify_content(_meta("h/html"), content_hit="chunk", has_markup_file=False)
    low = _meta("l/low", stars=100)
    high_stars = _meta("s/stars", stars=500)
    code_low_stars = _code("c/one", stars=1)
    code_high_stars = _code("c/two", stars=2)

    ranked = rank_matches([low, high_stars, html, code_low_stars, code_high_stars])

    assert [m.full_name for m in ranked] == ["c/two", "c/one", "h/html", "s/stars", "l/low"]


def test_rank_is_stable_for_equal_keys():
    items = [_meta("x/1"), _meta("x/2"), _meta("x/3")]
    assert [m.full_name for m in rank_matches(items)] == ["x/1", "x/2", "x/3"]


def test_normalize_text_collapses_whitespace_and_case():
    assert normalize_text("  <Div>\n\tHello   WORLD </div>  ") == "<div> hello world </div>"


def test_content_chunks_limits():
    assert content_chunks("a" * 100) == []

    text = "".join(chr(ord("a") + i % 26) * 10 for i in range(80))  # 800 chars
    chunks = content_chunks(text)
    assert len(chunks) == 5
    assert all(len(c) == 100 for c in chunks)
    assert chunks[0] == text[:100]
    assert chunks[4] == text[400:500]

    short = content_chunks("b" * 150)
    assert short == ["b" * 100, "b" * 50]


def test_find_chunk_returns_first_present_chunk():
    assert find_chunk("xx second yy", ["first", "second", "yy"]) == "second"
    assert find_chunk("nothing", ["first"]) is None


def test_classify_content_outcomes():
    base = _code("a/b")

    hit = classify_content(base, content_hit="<html> chunk", has_markup_file=True)
    assert hit.detection_type is DetectionType.HTML_CONTENT
    assert hit.similarity_score == CONTENT_MATCH_SCORE
    assert hit.match_context == "<html> chunk"
    assert hit.reference_location is ReferenceLocation.CODE_FILE

    markup = classify_content(base, content_hit=None, has_markup_file=True)
    assert markup.detection_type is DetectionType.CODE
    assert markup.similarity_score == MARKUP_FILE_SCORE
    assert markup.match_context == base.match_context

    unchanged = classify_content(base, content_hit=None, has_markup_file=False)
    assert unchanged == base
