"""Prompt review orchestration: gather files, call the evaluator, publish the report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from github import GithubException
from rich.console import Console

from promptlens_core.api.client import ReviewClient
from promptlens_core.api.contract import FileEntry, build_request, parse_response
from promptlens_core.api.errors import ReviewAPIError
from promptlens_core.gh.actions import set_output, write_step_summary
from promptlens_core.gh.pull_request import get_pull, get_repo, post_or_update_comment, post_review_verdict
from promptlens_core.models import ComparisonResult, PullRequest, ReviewMode
from promptlens_core.report import (
    PR_COMMENT_MAX_LENGTH,
    file_mode,
    format_job_summary,
    format_on_demand_summary,
    format_pr_comment,
    merge_findings,
)
from promptlens_core.utils.files import FileChange, fetch_file_versions, load_system_overview, read_file_from_disk
from promptlens_core.verdict import calculate_verdict

console = Console(stderr=True)
logger = logging.getLogger(__name__)

_VERDICT_BODY = {
    "REQUEST_CHANGES": "Prompt review found regressions. See the review comment above for details.",
    "COMMENT": "Prompt review complete. See the review comment above for details.",
}


@dataclass
class ReviewOutcome:
    """What a review produced, for the CLI to report and for tests to inspect."""

    markdown: str
    comparisons: list[ComparisonResult] = field(default_factory=list)
    event: str | None = None  # "COMMENT" | "REQUEST_CHANGES"; None in on-demand mode
    overall_score: str = ""
    review_summary: str = ""


def _get_client(config: dict) -> ReviewClient:
    return ReviewClient(api_url=config["api_url"], timeout_ms=config["timeout_ms"])


def _send(request: dict, config: dict, client: ReviewClient | None) -> dict:
    """Send through ``client`` if given, else through a client owned for this call."""
    if client is not None:
        return client.send(request)
    with _get_client(config) as owned:
        return owned.send(request)


def build_file_entries(changes: list[FileChange], base_sha: str, head_sha: str) -> list[FileEntry]:
    entries = []
    for change in changes:
        before, after = fetch_file_versions(change, base_sha, head_sha)
        entries.append(
            FileEntry(
                path=change.filename,
                name=PurePosixPath(change.filename).name,
                status=change.status,
                after=after,
                before=before,
            )
        )
    return entries


def _determine_event(comparisons: list[ComparisonResult], mode: ReviewMode) -> str:
    """REQUEST_CHANGES if any file's verdict rejects the change, else COMMENT."""
    events = {
        calculate_verdict(
            merge_findings(c.synthesis.factor_insights, c.factor_results), file_mode(c, mode)
        ).review_event
        for c in comparisons
    }
    return "REQUEST_CHANGES" if "REQUEST_CHANGES" in events else "COMMENT"


def _publish_summary(markdown: str, overall_score: str, review_summary: str) -> None:
    if not write_step_summary(markdown):
        logger.info("GITHUB_STEP_SUMMARY is not set; skipping job summary.")
    set_output("overall_score", overall_score)
    set_output("review_summary", review_summary)


def run_pr_review(
    repo: str,
    pr_number: int,
    config: dict,
    changes: list[FileChange],
    base_sha: str | None = None,
    head_sha: str | None = None,
    repo_obj=None,
    client: ReviewClient | None = None,
    post: bool = True,
) -> ReviewOutcome | None:
    """Review the changed prompt files of a pull request.

    Returns None when there is nothing to review. With ``post=False`` the
    report is rendered and returned but nothing is written to GitHub.
    """
    if not changes:
        console.print("[yellow]No prompt files changed in this PR. Nothing to do.[/yellow]")
        return None

    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])
    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    base_sha = base_sha or this_pr.base.sha
    head_sha = head_sha or this_pr.head.sha
    console.print(f"PR #{pr_number}: base={base_sha[:7]} head={head_sha[:7]}")
    console.print(f"Found {len(changes)} changed prompt file(s): {', '.join(c.filename for c in changes)}")

    entries = build_file_entries(changes, base_sha, head_sha)
    request = build_request(
        api_key=config["api_key"],
        mode="pr",
        files=entries,
        system_overview=load_system_overview(config.get("system_overview")),
        repository=repo,
        pr_number=pr_number,
    )

    console.print(f"Calling review API with {len(entries)} file(s)...")
    results = parse_response(_send(request, config, client))
    comparisons = [r.comparison for r in results if r.comparison is not None]
    console.print(f"API returned {len(comparisons)} evaluation(s).")

    mode = PullRequest(base_ref=base_sha, head_ref=head_sha)
    comment = format_pr_comment(
        comparisons, mode, max_length=config.get("max_comment_chars", PR_COMMENT_MAX_LENGTH)
    )
    event = _determine_event(comparisons, mode)

    if post:
        action = post_or_update_comment(this_pr, comment)
        console.print(f"[green]PR comment {action}.[/green]")
        if config.get("post_review_verdict", True):
            if post_review_verdict(this_pr, event, _VERDICT_BODY[event]):
                console.print(f"[green]Review posted: {event}[/green]")
            else:
                console.print("[yellow]Could not post the review verdict; see log for details.[/yellow]")

    overall_score = ", ".join(c.synthesis.overall_score for c in comparisons)
    review_summary = " | ".join(c.synthesis.prompt_description for c in comparisons)
    _publish_summary(format_job_summary(comparisons, mode), overall_score, review_summary)

    return ReviewOutcome(
        markdown=comment,
        comparisons=comparisons,
        event=event,
        overall_score=overall_score,
        review_summary=review_summary,
    )


def run_on_demand_review(prompt_file: str, config: dict, client: ReviewClient | None = None) -> ReviewOutcome:
    """Evaluate a single prompt file from the working tree, with no comparison."""
    console.print(f"On-demand evaluation of: {prompt_file}")
    content = read_file_from_disk(prompt_file)
    entry = FileEntry(
        path=prompt_file,
        name=PurePosixPath(prompt_file).name,
        status="added",
        after=content,
        before=None,
    )
    request = build_request(
        api_key=config["api_key"],
        mode="on-demand",
        files=[entry],
        system_overview=load_system_overview(config.get("system_overview")),
    )

    console.print("Calling review API...")
    results = parse_response(_send(request, config, client))
    if not results or results[0].synthesis is None:
        raise ReviewAPIError("API returned error: no evaluation results")

    result = results[0]
    markdown = format_on_demand_summary(result.synthesis, result.factor_results)
    _publish_summary(markdown, result.synthesis.overall_score, result.synthesis.prompt_description)
    console.print(f"Done. Overall: {result.synthesis.overall_score}")

    return ReviewOutcome(
        markdown=markdown,
        overall_score=result.synthesis.overall_score,
        review_summary=result.synthesis.prompt_description,
    )
