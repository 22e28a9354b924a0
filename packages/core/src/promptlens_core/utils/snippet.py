"""Strip accidentally captured section headers from code excerpts.

The evaluator sometimes extracts a snippet together with the structural
header above it ("3) Output (strict)", "## Instructions"). Rendered under a
numbered finding, those headers read like finding numbers and confuse the
reader, so they are dropped. Matching is conservative: anything
indented, lowercase-led or sentence-length is kept.
"""

from __future__ import annotations

import re

# "(strict)", "(optional)" and similar trailing annotations.
_ANNOTATION_RE = re.compile(r"\s*\([^)]+\)\s*$")

_HEADER_PATTERNS = [
    re.compile(r"^\d+\)\s+[A-Z]"),  # 1) Output
    re.compile(r"^#{1,6}\s+\d+\)\s+[A-Z]"),  # ## 3) Output
    re.compile(r"^#{1,6}\s+[A-Z]"),  # ## Instructions
    re.compile(r"^[A-Z][a-zA-Z\s]{1,30}:\s*$"),  # Output:
]

_RULE_RE = re.compile(r"^(?:-{3,}|={3,}|\*{3,})$")


def is_section_header(line: str) -> bool:
    """Return True if ``line`` looks like a structural header rather than code."""
    if line != line.strip():
        return False

    cleaned = _ANNOTATION_RE.sub("", line).strip()
    if any(p.match(cleaned) for p in _HEADER_PATTERNS):
        return True

    # Horizontal rules are checked against the line as written.
    return bool(_RULE_RE.match(line))


def clean_code_snippet(code: str) -> str:
    """Drop section-header lines from ``code``, keeping everything else verbatim.

    Never returns an empty string for non-empty input: if every line was
    classified as a header, the original excerpt is returned untouched.
    """
    kept = [line for line in code.split("\n") if not line.strip() or not is_section_header(line)]
    # Trim blank edge lines only, so the first line keeps its indentation.
    while kept and not kept[0].strip():
        kept.pop(0)
    while kept and not kept[-1].strip():
        kept.pop()
    result = "\n".join(kept)

    if not result and code.strip():
        return code
    return result
