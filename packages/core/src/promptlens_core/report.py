"""Markdown report rendering for prompt evaluations.

One section per reviewed file:

    header → evaluation table → verdict (PR mode) → considerations

Sections are assembled into a PR comment (size-capped, marker-tagged so the
caller can find and update it on the next run) or a job summary (uncapped).
Rendering is pure: no I/O, no mutation of the input models.
"""

from __future__ import annotations

import dataclasses
import logging

from promptlens_core.models import (
    ComparisonResult,
    FactorInsight,
    FactorResult,
    Finding,
    OnDemand,
    ReviewMode,
    SynthesisResult,
    infer_mode,
)
from promptlens_core.utils.markdown import (
    escape_table_cell,
    fenced_block,
    sanitize_inline_text,
    single_line,
)
from promptlens_core.utils.snippet import clean_code_snippet
from promptlens_core.verdict import calculate_verdict, format_verdict

logger = logging.getLogger(__name__)

BOT_MARKER = "<!-- promptlens-review -->"

# GitHub rejects comment bodies above 65536 characters.
PR_COMMENT_MAX_LENGTH = 65000

TRUNCATION_NOTICE = (
    "\n\n---\n\n**Comment truncated.** See the Job Summary in the Actions tab for the full detailed report.\n"
)

_REPORT_TITLE = "# PROMPT REVIEW"

_CHANGE_LABEL = {
    "improved": "✅ Improved",
    "worse": "⚠️ Worse",
    "mixed": "🔄 Mixed",
    "no-change": "➖ No change",
}


def traffic_light(score: int) -> str:
    if score <= 4:
        return "🔴"
    if score <= 7:
        return "🟡"
    return "🟢"


def change_label(direction: str | None) -> str:
    return _CHANGE_LABEL.get(direction or "no-change", _CHANGE_LABEL["no-change"])


def merge_findings(insights: list[FactorInsight], factor_results: list[FactorResult]) -> list[FactorInsight]:
    """Take findings from ``factor_results``, matched by factor id.

    The synthesis step can drop or truncate findings, so the per-factor
    results are the source of truth. Insights without a matching result keep
    what they have. Returns new objects; the inputs are left untouched.
    """
    by_id = {r.factor_id: r for r in factor_results}
    merged = []
    for insight in insights:
        result = by_id.get(insight.factor_id)
        if result is not None:
            insight = dataclasses.replace(insight, findings=list(result.findings))
        merged.append(insight)
    return merged


# ---------------------------------------------------------------------------
# Section pieces
# ---------------------------------------------------------------------------


def format_prompt_header(prompt_file: str, description: str) -> str:
    return f"## `{prompt_file}`\n\n**Prompt overview:** {single_line(description)}\n\n"


def format_evaluation_table(
    factor_results: list[FactorResult],
    insights: list[FactorInsight],
    mode: ReviewMode,
) -> str:
    pr_mode = mode.is_pull_request
    lines = ["### Evaluation", ""]
    if pr_mode:
        lines.append("| Factor | Factor Assessment | Impact of PR | Rationale |")
        lines.append("|--------|-------------------|--------------|-----------|")
    else:
        lines.append("| Factor | Factor Assessment | Rationale |")
        lines.append("|--------|-------------------|-----------|")

    insight_by_id = {i.factor_id: i for i in insights}
    for factor in factor_results:
        insight = insight_by_id.get(factor.factor_id)
        rationale = factor.table_rationale
        if pr_mode and insight is not None and insight.change_rationale:
            separator = " " if insight.change_rationale.endswith(".") else ". "
            rationale = f"{insight.change_rationale}{separator}{factor.table_rationale}"
        # Collapse newlines too: a line break ends the table row.
        rationale = escape_table_cell(" ".join(rationale.split()))

        cells = [f"**{escape_table_cell(factor.factor_name)}**", traffic_light(factor.score)]
        if pr_mode:
            cells.append(change_label(insight.change_direction if insight else None))
        cells.append(rationale)
        lines.append(f"| {' | '.join(cells)} |")

    return "\n".join(lines) + "\n\n---\n\n"


def _line_ref(finding: Finding) -> str:
    snippet = finding.code_snippet
    if snippet.start_line == snippet.end_line:
        return f"{snippet.start_line}"
    return f"{snippet.start_line}-{snippet.end_line}"


def format_finding(finding: Finding, prompt_file: str) -> str:
    snippet = finding.code_snippet
    title = (snippet.issue if snippet and snippet.issue.strip() else "") or finding.description
    md = f"<h4>{finding.finding_number}. {single_line(title)}</h4>\n\n"

    if snippet and snippet.code.strip():
        description = sanitize_inline_text(finding.description)
        if not description.endswith("."):
            description += "."
        md += (
            f"**Assessment observation:** {description} "
            f"Prompt text example from `{prompt_file}:{_line_ref(finding)}`\n\n"
        )
        cleaned = clean_code_snippet(snippet.code)
        if cleaned.strip():
            md += fenced_block(cleaned)

    md += f"**Consideration:** {sanitize_inline_text(finding.consideration)}\n\n"

    if finding.rewritten_code and finding.rewritten_code.strip():
        md += "**Proposed prompt edit:**\n\n"
        md += fenced_block(finding.rewritten_code)

    return md + "---\n\n"


def _summary_label(finding_count: int, has_changes: bool) -> str:
    if has_changes and finding_count:
        noun = "improvement" if finding_count == 1 else "improvements"
        return f"{finding_count} {noun} + PR changes"
    if has_changes:
        return "PR changes only"
    return "1 finding" if finding_count == 1 else f"{finding_count} findings"


def format_factor_findings(insight: FactorInsight, prompt_file: str, mode: ReviewMode) -> str:
    has_changes = bool(insight.change_details)
    if not insight.findings and not has_changes:
        return ""

    label = _summary_label(len(insight.findings), has_changes)
    md = "<details>\n"
    md += f"<summary><strong>{insight.factor_name}</strong> — {label}</summary>\n\n"
    md += "<br>\n\n"

    if mode.is_pull_request:
        md += "<h4>Changes in this PR</h4>\n\n"
        if has_changes:
            for change in insight.change_details:
                md += f"- {sanitize_inline_text(change)}\n"
        else:
            md += "No observed changes in this PR.\n"
        md += "\n---\n\n"

    if insight.findings:
        if mode.is_pull_request:
            md += "<h4>Further improvements</h4>\n\n"
        for finding in insight.findings:
            md += format_finding(finding, prompt_file)

    return md + "</details>\n\n"


def format_considerations(insights: list[FactorInsight], prompt_file: str, mode: ReviewMode) -> str:
    critical = [i for i in insights if i.score <= 4]
    opportunities = [i for i in insights if 5 <= i.score <= 7]
    if not critical and not opportunities:
        return ""

    md = "### Considerations\n\n"
    if critical:
        md += "#### 🔴 Major Gaps\n\n"
        md += "".join(format_factor_findings(i, prompt_file, mode) for i in critical)
    if opportunities:
        md += "#### 🟡 Opportunities to Improve\n\n"
        md += "".join(format_factor_findings(i, prompt_file, mode) for i in opportunities)
    return md


def _render_section(
    prompt_file: str,
    description: str,
    insights: list[FactorInsight],
    factor_results: list[FactorResult],
    mode: ReviewMode | None,
) -> str:
    insights = merge_findings(insights, factor_results)
    if mode is None:
        mode = infer_mode(insights)

    md = format_prompt_header(prompt_file, description)
    md += format_evaluation_table(factor_results, insights, mode)
    md += format_verdict(calculate_verdict(insights, mode))
    md += format_considerations(insights, prompt_file, mode)
    return md


def file_mode(comparison: ComparisonResult, mode: ReviewMode | None) -> ReviewMode | None:
    """Narrow a run-wide mode to one file: a file added by the PR has nothing to compare."""
    if mode is not None and mode.is_pull_request and comparison.is_new_file:
        return OnDemand()
    return mode


def format_file_section(comparison: ComparisonResult, mode: ReviewMode | None = None) -> str:
    """Render one reviewed file. ``mode`` is inferred from the data when omitted."""
    return _render_section(
        comparison.prompt_file,
        comparison.synthesis.prompt_description,
        comparison.synthesis.factor_insights,
        comparison.factor_results,
        file_mode(comparison, mode),
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def _count_line(comparisons: list[ComparisonResult]) -> str:
    factor_count = len(comparisons[0].factor_results) if comparisons else 0
    return f"Reviewed {len(comparisons)} prompt file(s) against {factor_count} factors."


def truncate_report(md: str, max_length: int = PR_COMMENT_MAX_LENGTH, log: logging.Logger | None = None) -> str:
    """Hard-cut ``md`` so that it plus the truncation notice fits ``max_length``.

    Fence balance is not repaired at the cut; the notice is always appended.
    A limit shorter than the notice itself cuts the notice too.
    """
    if len(md) <= max_length:
        return md
    (log or logger).warning("Report is %d characters; truncating to %d.", len(md), max_length)
    if max_length < len(TRUNCATION_NOTICE):
        return TRUNCATION_NOTICE[: max(0, max_length)]
    return md[: max_length - len(TRUNCATION_NOTICE)] + TRUNCATION_NOTICE


def format_pr_comment(
    comparisons: list[ComparisonResult],
    mode: ReviewMode | None = None,
    max_length: int = PR_COMMENT_MAX_LENGTH,
    log: logging.Logger | None = None,
) -> str:
    """Render the PR comment body for every reviewed file.

    ``log`` receives the truncation warning; defaults to this module's logger.
    """
    md = f"{BOT_MARKER}\n{_REPORT_TITLE}\n\n{_count_line(comparisons)}\n\n---\n\n"
    for comparison in comparisons:
        md += format_file_section(comparison, mode)
        md += "\n---\n\n"
    return truncate_report(md, max_length, log=log)


def format_job_summary(comparisons: list[ComparisonResult], mode: ReviewMode | None = None) -> str:
    """Render the full, untruncated report for the Actions job summary."""
    md = f"{_REPORT_TITLE}\n\n{_count_line(comparisons)}\nMode: Pull Request\n\n---\n\n"
    for comparison in comparisons:
        md += format_file_section(comparison, mode)
        md += "\n---\n\n"
    return md


def format_on_demand_summary(synthesis: SynthesisResult, factor_results: list[FactorResult]) -> str:
    """Render a single-file report with no comparison and no verdict."""
    md = f"{_REPORT_TITLE}\n\nReviewed 1 prompt file against {len(factor_results)} factors.\nMode: On-Demand\n\n---\n\n"
    md += _render_section(
        synthesis.prompt_file,
        synthesis.prompt_description,
        synthesis.factor_insights,
        factor_results,
        OnDemand(),
    )
    return md + "\n---\n\n"
