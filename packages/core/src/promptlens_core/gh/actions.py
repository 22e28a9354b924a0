"""GitHub Actions output surfaces: job summary and step outputs.

Both are plain files whose paths Actions injects through the environment.
Outside Actions the variables are unset and the writers report False so the
caller can fall back to printing.
"""

from __future__ import annotations

import os
import uuid


def write_step_summary(markdown: str) -> bool:
    path = os.environ.get("GITHUB_STEP_SUMMARY")
    if not path:
        return False
    with open(path, "a", encoding="utf-8") as f:
        f.write(markdown)
        if not markdown.endswith("\n"):
            f.write("\n")
    return True


def set_output(name: str, value: str) -> bool:
    path = os.environ.get("GITHUB_OUTPUT")
    if not path:
        return False
    with open(path, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")
    return True
