"""CLI output formatting: human-readable text and the JSON wire shape."""

from __future__ import annotations

from typing import Any

from ..core.domain.catalog import SourceCatalog
from ..core.domain.models import DetectionRecord, DetectionResult, DetectionSource, RepositoryMatch


def _iso(value) -> str:
    return value.isoformat().replace("+00:00", "Z")


def repository_to_dict(repo: RepositoryMatch) -> dict[str, Any]:
    data: dict[str, Any] = {
        "full_name": repo.full_name,
        "html_url": repo.html_url,
        "similarity_score": repo.similarity_score,
        "detection_type": repo.detection_type.value,
        "reference_location": repo.reference_location.value,
        "match_context": repo.match_context,
        "file_links": list(repo.file_links),
        "stargazers_count": repo.stargazers_count,
        "forks_count": repo.forks_count,
        "language": repo.language,
    }
    if repo.code_match is not None:
        data["code_match"] = {"path": repo.code_match.path, "html_url": repo.code_match.html_url}
    return data


def record_to_dict(record: DetectionRecord) -> dict[str, Any]:
    data: dict[str, Any] = {
        "modelName": record.model_name,
        "contentType": record.content_type.value,
        "confidenceLevel": record.confidence,
        "source": record.source,
        "lastDetected": _iso(record.last_detected),
    }
    if record.repositories is not None:
        data["data"] = {"repositories": [repository_to_dict(r) for r in record.repositories]}
    return data


def result_to_dict(result: DetectionResult) -> dict[str, Any]:
    """Camel-cased payload of the detection API response."""
    return {
        "aiModels": [record_to_dict(r) for r in result.ai_models],
        "copycatSites": [
            {
                "url": site.url,
                "similarityScore": site.similarity_score,
                "copiedFeatures": list(site.copied_features),
                "detectionMethod": site.detection_method,
                "screenshot": site.screenshot,
            }
            for site in result.copycat_sites
        ],
        "analysisComplete": result.analysis_complete,
        "lastAnalyzed": _iso(result.last_analyzed),
    }


def source_to_dict(source: DetectionSource) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": source.id,
        "name": source.name,
        "description": source.description,
        "type": source.type.value,
        "category": source.category.value,
        "contentType": source.content_type.value,
        "hasSubOptions": source.has_sub_options,
    }
    if source.has_sub_options:
        data["subOptions"] = {key: ",".join(indexes) for key, indexes in source.sub_options.items()}
    return data


def catalog_to_dict(catalog: SourceCatalog) -> dict[str, Any]:
    return {"sources": {source.id: source_to_dict(source) for source in catalog}}


def format_detection_result(result: DetectionResult) -> str:
    """Format a detection result for human-readable CLI output."""
    lines = []
    lines.append("=" * 80)
    lines.append("DETECTION RESULT")
    lines.append("=" * 80)
    lines.append(f"Analyzed: {_iso(result.last_analyzed)}")

    if not result.ai_models:
        lines.append("\nNo findings.")
        lines.append("=" * 80)
        return "\n".join(lines)

    for record in result.ai_models:
        lines.append("\n" + "-" * 80)
        lines.append(f"{record.model_name} [{record.content_type.value}]")
        lines.append("-" * 80)
        lines.append(f"Confidence: {record.confidence}")
        lines.append(f"Source: {record.source}")

        if record.repositories:
            lines.append("")
            lines.append(
                f"{'Repository':<40} {'Location':<14} {'Type':<13} {'Score':>5} {'Stars':>8} {'Language':<12}"
            )
            for repo in record.repositories:
                name = repo.full_name
                # Truncate long repo names
                if len(name) > 40:
                    name = name[:37] + "..."
                lines.append(
                    f"{name:<40} {repo.reference_location.value:<14} {repo.detection_type.value:<13} "
                    f"{repo.similarity_score:>5.2f} {repo.stargazers_count:>8,} {repo.language or 'N/A':<12}"
                )

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)


def format_source_list(catalog: SourceCatalog) -> str:
    lines = [f"Found {len(catalog)} sources:", ""]
    lines.append(f"{'ID':<18} {'Name':<20} {'Category':<10} {'Content':<8} Options")
    lines.append("-" * 80)
    for source in catalog:
        options = ", ".join(source.sub_options) if source.has_sub_options else "-"
        lines.append(
            f"{source.id:<18} {source.name:<20} {source.category.value:<10} {source.content_type.value:<8} {options}"
        )
    return "\n".join(lines)
