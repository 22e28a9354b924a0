"""Evaluation result data models.

The evaluator speaks camelCase JSON; these dataclasses are the snake_case view
the renderer works with. Every entity is built once from the API response and
treated as read-only afterwards: rendering derives new strings and never
edits a model in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field

CHANGE_DIRECTIONS = ("improved", "no-change", "worse", "mixed")


def score_label(score: int) -> str:
    """Band a 1-10 factor score: 1-4 Critical, 5-7 Needs Work, 8-10 Good."""
    if score <= 4:
        return "Critical"
    if score <= 7:
        return "Needs Work"
    return "Good"


@dataclass(frozen=True)
class CodeSnippet:
    start_line: int
    end_line: int
    issue: str
    code: str

    @classmethod
    def from_dict(cls, d: dict) -> CodeSnippet:
        return cls(
            start_line=d.get("startLine", 0),
            end_line=d.get("endLine", d.get("startLine", 0)),
            issue=d.get("issue", "") or "",
            code=d.get("code", "") or "",
        )


@dataclass(frozen=True)
class Finding:
    """One concrete issue inside a factor evaluation."""

    finding_number: int
    description: str
    consideration: str = ""
    code_snippet: CodeSnippet | None = None
    rewritten_code: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Finding:
        # Older evaluator builds emit "recommendation" or a "recommendations"
        # list instead of "consideration".
        consideration = d.get("consideration") or d.get("recommendation") or ""
        if not consideration and d.get("recommendations"):
            consideration = " ".join(d["recommendations"])
        snippet = d.get("codeSnippet")
        return cls(
            finding_number=d.get("findingNumber", 0),
            description=d.get("description", "") or "",
            consideration=consideration,
            code_snippet=CodeSnippet.from_dict(snippet) if snippet else None,
            rewritten_code=d.get("rewrittenCode"),
        )


def _change_direction(d: dict) -> str | None:
    direction = d.get("changeDirection")
    return direction if direction in CHANGE_DIRECTIONS else None


@dataclass(frozen=True)
class FactorResult:
    """Authoritative per-factor evaluation, including the full findings list.

    The change fields mirror the payload; reports read change data from
    ``FactorInsight`` instead.
    """

    factor_id: str
    factor_name: str
    score: int
    score_label: str
    table_rationale: str = ""
    findings: list[Finding] = field(default_factory=list)
    change_direction: str | None = None
    change_rationale: str | None = None
    change_details: list[str] | None = None

    @classmethod
    def from_dict(cls, d: dict) -> FactorResult:
        score = int(d.get("score", 0))
        return cls(
            factor_id=d.get("factorId", ""),
            factor_name=d.get("factorName", ""),
            score=score,
            score_label=d.get("scoreLabel") or score_label(score),
            table_rationale=d.get("tableRationale", "") or "",
            findings=[Finding.from_dict(f) for f in d.get("findings") or []],
            change_direction=_change_direction(d),
            change_rationale=d.get("changeRationale"),
            change_details=d.get("changeDetails"),
        )


@dataclass(frozen=True)
class FactorInsight:
    """A factor as seen by the synthesis step.

    ``change_direction`` and friends are only populated when a prior version of
    the file existed. ``findings`` here may be stale; see
    ``promptlens_core.report.merge_findings``.
    """

    factor_id: str
    factor_name: str
    score: int
    score_label: str
    findings: list[Finding] = field(default_factory=list)
    change_direction: str | None = None
    change_rationale: str | None = None
    change_details: list[str] | None = None

    @classmethod
    def from_dict(cls, d: dict) -> FactorInsight:
        score = int(d.get("score", 0))
        return cls(
            factor_id=d.get("factorId", ""),
            factor_name=d.get("factorName", ""),
            score=score,
            score_label=d.get("scoreLabel") or score_label(score),
            findings=[Finding.from_dict(f) for f in d.get("findings") or []],
            change_direction=_change_direction(d),
            change_rationale=d.get("changeRationale"),
            change_details=d.get("changeDetails"),
        )


@dataclass(frozen=True)
class SynthesisResult:
    prompt_name: str
    prompt_file: str
    prompt_description: str
    overall_score: str
    has_critical_issues: bool = False
    factor_insights: list[FactorInsight] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> SynthesisResult:
        return cls(
            prompt_name=d.get("promptName", ""),
            prompt_file=d.get("promptFile", ""),
            prompt_description=d.get("promptDescription", "") or "",
            overall_score=d.get("overallScore", ""),
            has_critical_issues=bool(d.get("hasCriticalIssues", False)),
            factor_insights=[FactorInsight.from_dict(f) for f in d.get("factorInsights") or []],
        )


@dataclass(frozen=True)
class FactorDelta:
    factor_id: str
    factor_name: str
    before_score: int | None
    after_score: int
    delta: int
    before_label: str | None
    after_label: str

    @classmethod
    def from_dict(cls, d: dict) -> FactorDelta:
        return cls(
            factor_id=d.get("factorId", ""),
            factor_name=d.get("factorName", ""),
            before_score=d.get("beforeScore"),
            after_score=d.get("afterScore", 0),
            delta=d.get("delta", 0),
            before_label=d.get("beforeLabel"),
            after_label=d.get("afterLabel", ""),
        )


@dataclass(frozen=True)
class ComparisonResult:
    """The full before/after evaluation bundle for one reviewed file.

    ``deltas`` and ``has_regression`` are carried for callers that consume the
    parsed payload; the report and verdict derive regressions from the
    insights' change directions.
    """

    prompt_file: str
    synthesis: SynthesisResult
    factor_results: list[FactorResult] = field(default_factory=list)
    is_new_file: bool = False
    deltas: list[FactorDelta] = field(default_factory=list)
    has_regression: bool = False
    has_critical_issue: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> ComparisonResult:
        return cls(
            prompt_file=d.get("promptFile", ""),
            synthesis=SynthesisResult.from_dict(d.get("synthesis") or {}),
            factor_results=[FactorResult.from_dict(f) for f in d.get("factorResults") or []],
            is_new_file=bool(d.get("isNewFile", False)),
            deltas=[FactorDelta.from_dict(x) for x in d.get("deltas") or []],
            has_regression=bool(d.get("hasRegression", False)),
            has_critical_issue=bool(d.get("hasCriticalIssue", False)),
        )


# ---------------------------------------------------------------------------
# Review mode
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OnDemand:
    """A single file evaluated in isolation: no comparison, no verdict."""

    is_pull_request = False


@dataclass(frozen=True)
class PullRequest:
    """A pull request review comparing ``base_ref`` against ``head_ref``."""

    base_ref: str = ""
    head_ref: str = ""

    is_pull_request = True


ReviewMode = OnDemand | PullRequest


def infer_mode(insights: list[FactorInsight]) -> ReviewMode:
    """Guess the mode from data shape when the caller did not pass one.

    Any insight carrying a change direction means a prior version existed.
    """
    if any(i.change_direction for i in insights):
        return PullRequest()
    return OnDemand()
