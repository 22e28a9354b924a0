"""CLI entry point for promptlens.

Commands:
  pr        — review the prompt files changed in a pull request
  evaluate  — evaluate one prompt file in isolation (on-demand mode)
  render    — render a saved evaluator response to markdown, offline
"""

from __future__ import annotations

import importlib.metadata

import click

from promptlens_cli.commands.evaluate import evaluate_cmd
from promptlens_cli.commands.pr import pr_cmd
from promptlens_cli.commands.render import render_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("promptlens"),
    prog_name="promptlens",
)
@click.option(
    "--config",
    "config_path",
    default=".promptlens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PROMPTLENS_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str):
    """Factor-based review of LLM prompt files, for pull requests and on demand."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(pr_cmd)
main.add_command(evaluate_cmd)
main.add_command(render_cmd)
