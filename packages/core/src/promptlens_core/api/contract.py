"""Request and response shapes of the evaluation service."""

from __future__ import annotations

from dataclasses import dataclass, field

from promptlens_core.api.errors import ReviewAPIError
from promptlens_core.models import ComparisonResult, FactorResult, SynthesisResult

FILE_STATUSES = ("added", "modified", "renamed")


@dataclass
class FileEntry:
    """One prompt file sent for evaluation. ``before`` is None for new files."""

    path: str
    name: str
    status: str
    after: str
    before: str | None = None

    def __post_init__(self):
        if self.status not in FILE_STATUSES:
            raise ValueError(f"Unknown file status: {self.status!r}. Expected one of {', '.join(FILE_STATUSES)}.")

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "name": self.name,
            "status": self.status,
            "after": self.after,
            "before": self.before,
        }


@dataclass
class ReviewFileResult:
    file: str
    factor_results: list[FactorResult] = field(default_factory=list)
    synthesis: SynthesisResult | None = None
    comparison: ComparisonResult | None = None

    @classmethod
    def from_dict(cls, d: dict) -> ReviewFileResult:
        synthesis = d.get("synthesis")
        comparison = d.get("comparison")
        return cls(
            file=d.get("file", ""),
            factor_results=[FactorResult.from_dict(f) for f in d.get("factorResults") or []],
            synthesis=SynthesisResult.from_dict(synthesis) if synthesis else None,
            comparison=ComparisonResult.from_dict(comparison) if comparison else None,
        )


def build_request(
    api_key: str,
    mode: str,
    files: list[FileEntry],
    system_overview: str | None = None,
    repository: str | None = None,
    pr_number: int | None = None,
) -> dict:
    """Build the JSON body for a review request. Empty optional fields are omitted."""
    if mode not in ("pr", "on-demand"):
        raise ValueError(f"Unknown review mode: {mode!r}. Choose 'pr' or 'on-demand'.")

    request: dict = {
        "apiKey": api_key,
        "mode": mode,
        "files": [f.to_dict() for f in files],
    }
    if system_overview:
        request["systemOverview"] = system_overview

    metadata = {}
    if repository:
        metadata["repository"] = repository
    if pr_number is not None:
        metadata["prNumber"] = pr_number
    if metadata:
        request["metadata"] = metadata
    return request


def parse_response(payload: dict) -> list[ReviewFileResult]:
    """Validate a decoded response and return its per-file results.

    A 2xx whose body does not report success is a terminal failure, not a
    retry condition.
    """
    if not isinstance(payload, dict):
        raise ReviewAPIError("API returned error: Unknown error")
    results = payload.get("results")
    if payload.get("status") != "success" or not isinstance(results, list):
        raise ReviewAPIError(f"API returned error: {payload.get('message') or 'Unknown error'}")
    return [ReviewFileResult.from_dict(r) for r in results]
