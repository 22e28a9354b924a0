"""Read prompt file versions from git and from the working tree.

PR mode reads both sides of the change with ``git show`` rather than the
GitHub contents API, which caps file size. The workflow must check out the
repository with full history (``fetch-depth: 0``) for the base ref to exist.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Messages git prints when the path is simply absent at the ref.
_MISSING_MARKERS = ("does not exist", "exists on disk, but not in")


@dataclass(frozen=True)
class FileChange:
    filename: str
    status: str  # "added" | "modified" | "renamed"
    previous_filename: str | None = None


def git_show_file(ref: str, file_path: str) -> str | None:
    """Return the content of ``file_path`` at ``ref``, or None if it is absent there."""
    try:
        result = subprocess.run(
            ["git", "show", f"{ref}:{file_path}"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        logger.warning("git is not installed; cannot read %s at %s", file_path, ref)
        return None

    if result.returncode == 0:
        return result.stdout
    if not any(marker in result.stderr for marker in _MISSING_MARKERS):
        logger.warning("Unexpected error reading %s at %s: %s", file_path, ref, result.stderr.strip())
    return None


def fetch_file_versions(change: FileChange, base_sha: str, head_sha: str) -> tuple[str | None, str]:
    """Return ``(before, after)`` content for a changed prompt file.

    ``before`` is None for added files, and for files whose base version
    cannot be read (they are then evaluated as new).
    """
    after = git_show_file(head_sha, change.filename)
    if after is None:
        raise FileNotFoundError(
            f'Could not read file "{change.filename}" at HEAD ({head_sha}). '
            "Ensure the repository is checked out with full history (fetch-depth: 0)."
        )

    if change.status == "added":
        return None, after

    before_path = change.previous_filename if change.status == "renamed" and change.previous_filename else change.filename
    before = git_show_file(base_sha, before_path)
    if before is None:
        logger.warning("Could not read base version of %s at %s. Treating as new file.", before_path, base_sha)
    return before, after


def read_file_from_disk(file_path: str) -> str:
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f'Prompt file not found: "{file_path}"')
    return path.read_text(encoding="utf-8")


def load_system_overview(file_path: str | None) -> str:
    """Return the system overview text, or "" if unset or unreadable."""
    if not file_path:
        return ""
    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("System overview file not found at %s: %s. Continuing without it.", file_path, e)
        return ""
    logger.info("Loaded system overview from %s", file_path)
    return text
