"""evaluate command — on-demand review of a single prompt file."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from promptlens_core.api.errors import ReviewAPIError
from promptlens_core.reviewer import run_on_demand_review

console = Console(stderr=True)


@click.command("evaluate")
@click.argument("prompt_file")
@click.option("--api-url", default=None, help="Evaluation service URL. Overrides config file.")
@click.option("--timeout-ms", type=int, default=None, help="Per-attempt request timeout. Overrides config file.")
@click.option(
    "--system-overview",
    default=None,
    help="Markdown file describing the wider system. Overrides config file.",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    default=None,
    help="Write the markdown report to this file instead of stdout.",
)
@click.pass_context
def evaluate_cmd(
    ctx,
    prompt_file: str,
    api_url: str | None,
    timeout_ms: int | None,
    system_overview: str | None,
    output_path: str | None,
):
    """Evaluate PROMPT_FILE in isolation, with no before/after comparison.

    \b
    Required environment variables:
      PROMPTLENS_API_KEY   Evaluation service API key
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

    try:
        outcome = run_on_demand_review(prompt_file, config)
    except (ReviewAPIError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    if output_path:
        Path(output_path).write_text(outcome.markdown, encoding="utf-8")
        console.print(f"[green]Report written to {output_path}[/green]")
    else:
        click.echo(outcome.markdown)
