"""Accept/reject recommendation for a pull request's prompt changes.

The verdict is driven purely by regression detection: any factor that got
worse, or changed in a mixed way, rejects the change. Remaining low scores
that the PR did not introduce never block it; they are reported as work for
later.
"""

from __future__ import annotations

from dataclasses import dataclass

from promptlens_core.models import FactorInsight, ReviewMode, infer_mode

APPROVE = "APPROVE"
REJECT = "REJECT"


@dataclass(frozen=True)
class Verdict:
    decision: str | None  # "APPROVE" | "REJECT" | None (on-demand)
    text: str = ""

    @property
    def review_event(self) -> str:
        """GitHub review event the caller should post for this verdict."""
        return "REQUEST_CHANGES" if self.decision == REJECT else "COMMENT"


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def calculate_verdict(insights: list[FactorInsight], mode: ReviewMode | None = None) -> Verdict:
    """Derive the verdict for one file from its factor insights.

    When ``mode`` is omitted it is inferred from the data: no change direction
    on any insight means on-demand mode, which has no verdict.
    """
    if mode is None:
        mode = infer_mode(insights)
    if not mode.is_pull_request:
        return Verdict(decision=None)

    worse = [i for i in insights if i.change_direction == "worse"]
    mixed = [i for i in insights if i.change_direction == "mixed"]
    improved = [i for i in insights if i.change_direction == "improved"]

    if worse or mixed:
        parts = []
        if worse:
            parts.append(f"{', '.join(i.factor_name for i in worse)} regressed")
        if mixed:
            parts.append(f"{', '.join(i.factor_name for i in mixed)} had mixed changes (includes regressions)")
        text = f"{'; '.join(parts)}."
        if improved:
            text += " Remaining changes improve quality and would be accepted."
        return Verdict(decision=REJECT, text=text)

    remaining_critical = sum(1 for i in insights if i.score <= 4)
    remaining_opportunities = sum(1 for i in insights if 5 <= i.score <= 7)

    text = "Changes improve or maintain quality."
    if remaining_critical or remaining_opportunities:
        parts = []
        if remaining_critical:
            parts.append(_plural(remaining_critical, "critical gap", "critical gaps"))
        if remaining_opportunities:
            parts.append(
                _plural(remaining_opportunities, "improvement opportunity", "improvement opportunities")
            )
        text += f" {' and '.join(parts)} remain for future work."
    return Verdict(decision=APPROVE, text=text)


def format_verdict(verdict: Verdict) -> str:
    """Render the verdict as a markdown paragraph, or "" when there is none."""
    if verdict.decision is None:
        return ""
    icon = "⛔" if verdict.decision == REJECT else "✅"
    return f"**Review verdict:** {icon} {verdict.decision} — {verdict.text}\n\n"
