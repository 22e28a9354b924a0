"""render command — turn a saved evaluator response into markdown.

Handy for iterating on report layout without calling the service: save a
response body once, then re-render it as often as needed.
"""

from __future__ import annotations

import json

import click

from promptlens_core.api.contract import parse_response
from promptlens_core.api.errors import ReviewAPIError
from promptlens_core.models import OnDemand, PullRequest
from promptlens_core.report import format_job_summary, format_on_demand_summary, format_pr_comment


@click.command("render")
@click.argument("response_file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["comment", "summary", "on-demand"]),
    default="comment",
    show_default=True,
    help="Which report to render.",
)
@click.option(
    "--mode",
    type=click.Choice(["auto", "pr", "on-demand"]),
    default="auto",
    show_default=True,
    help="Review mode for comment/summary. 'auto' infers it from change data.",
)
def render_cmd(response_file, fmt: str, mode: str):
    """Render RESPONSE_FILE (a saved API response body) as markdown on stdout."""
    try:
        payload = json.load(response_file)
        results = parse_response(payload)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{response_file.name} is not valid JSON: {e}")
    except ReviewAPIError as e:
        raise click.ClickException(str(e))

    if fmt == "on-demand":
        if not results or results[0].synthesis is None:
            raise click.ClickException("Response contains no synthesis to render.")
        click.echo(format_on_demand_summary(results[0].synthesis, results[0].factor_results))
        return

    review_mode = {"auto": None, "pr": PullRequest(), "on-demand": OnDemand()}[mode]
    comparisons = [r.comparison for r in results if r.comparison is not None]
    if fmt == "summary":
        click.echo(format_job_summary(comparisons, review_mode))
    else:
        click.echo(format_pr_comment(comparisons, review_mode))
