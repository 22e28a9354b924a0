"""Markdown escaping helpers for evaluator-supplied text.

Everything the evaluator returns is untrusted as far as markdown structure is
concerned: a stray ``` in a finding description would open a code block that
swallows the rest of the comment, and a | inside a rationale would add a
table column. These helpers neutralise those sequences before the text is
embedded in the report.
"""

from __future__ import annotations

import re

_FENCE_RUN_RE = re.compile(r"`{3,}")
_FENCED_BLOCK_RE = re.compile(r"```[\s\S]*?```")


def sanitize_inline_text(text: str) -> str:
    """Escape every run of 3+ backticks so it cannot open or close a fence."""
    if not text:
        return text
    return _FENCE_RUN_RE.sub(lambda m: "\\`" * len(m.group(0)), text)


def escape_table_cell(text: str) -> str:
    return text.replace("|", "\\|")


def single_line(text: str) -> str:
    """Flatten free text into one fence-free line for use in a header."""
    text = _FENCED_BLOCK_RE.sub("", text or "")
    text = _FENCE_RUN_RE.sub("", text)
    return text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ").strip()


def code_fence(content: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``content``."""
    longest = max((len(m) for m in _FENCE_RUN_RE.findall(content or "")), default=0)
    return "`" * max(3, longest + 1)


def fenced_block(content: str) -> str:
    fence = code_fence(content)
    return f"{fence}\n{content}\n{fence}\n\n"
