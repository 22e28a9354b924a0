"""pr command — review the prompt files changed in a pull request."""

from __future__ import annotations

import click
from rich.console import Console

from promptlens_core.api.errors import ReviewAPIError
from promptlens_core.reviewer import run_pr_review
from promptlens_core.utils.files import FileChange

console = Console(stderr=True)


def _collect_changes(modified: tuple[str, ...], added: tuple[str, ...], renamed: tuple[tuple[str, str], ...]):
    changes = [FileChange(filename=path, status="modified") for path in modified]
    changes += [FileChange(filename=path, status="added") for path in added]
    changes += [FileChange(filename=new, status="renamed", previous_filename=old) for old, new in renamed]
    return changes


@click.command("pr")
@click.option(
    "--repo",
    required=True,
    envvar="GITHUB_REPOSITORY",
    help="GitHub repository in owner/name format.",
)
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option("--file", "modified", multiple=True, help="Modified prompt file. Repeatable.")
@click.option("--added", multiple=True, help="Prompt file added by the PR. Repeatable.")
@click.option(
    "--renamed",
    nargs=2,
    multiple=True,
    metavar="OLD NEW",
    help="Renamed prompt file, previous path first. Repeatable.",
)
@click.option("--base", "base_sha", default=None, help="Base commit. Defaults to the PR's base SHA.")
@click.option("--head", "head_sha", default=None, help="Head commit. Defaults to the PR's head SHA.")
@click.option("--api-url", default=None, help="Evaluation service URL. Overrides config file.")
@click.option("--timeout-ms", type=int, default=None, help="Per-attempt request timeout. Overrides config file.")
@click.option(
    "--system-overview",
    default=None,
    help="Markdown file describing the wider system. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the report without posting to GitHub.",
)
@click.pass_context
def pr_cmd(
    ctx,
    repo: str,
    pr_number: int,
    modified: tuple[str, ...],
    added: tuple[str, ...],
    renamed: tuple[tuple[str, str], ...],
    base_sha: str | None,
    head_sha: str | None,
    api_url: str | None,
    timeout_ms: int | None,
    system_overview: str | None,
    shadow: bool,
):
    """Review changed prompt files against the factor rubric.

    Both versions of every file are read with `git show`, so the repository
    must be checked out with full history.

    \b
    Required environment variables:
      PROMPTLENS_API_KEY   Evaluation service API key
      GITHUB_TOKEN         GitHub token with pull request write access
    """
    from promptlens_core.config import load_config

    config_path = ctx.obj.get("config_path", ".promptlens.yml") if ctx.obj else ".promptlens.yml"
    try:
        config = load_config(
            config_path,
            cli_overrides={"api_url": api_url, "timeout_ms": timeout_ms, "system_overview": system_overview},
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    if not config.get("api_key"):
        raise click.UsageError("PROMPTLENS_API_KEY environment variable is not set.")
    if not config.get("github_token"):
        raise click.UsageError("GITHUB_TOKEN environment variable is not set.")

    changes = _collect_changes(modified, added, renamed)

    try:
        outcome = run_pr_review(
            repo=repo,
            pr_number=pr_number,
            config=config,
            changes=changes,
            base_sha=base_sha,
            head_sha=head_sha,
            post=not shadow,
        )
    except (ReviewAPIError, FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))

    if outcome is None:
        return
    if shadow:
        click.echo(outcome.markdown)
        console.print(f"[bold]Shadow review complete. Verdict would be {outcome.event}.[/bold]")
