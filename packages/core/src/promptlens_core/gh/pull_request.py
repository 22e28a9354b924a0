from __future__ import annotations

import logging

from github import Github, GithubException

from promptlens_core.report import BOT_MARKER

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def find_bot_comment(pr):
    """Return the issue comment carrying the promptlens marker, or None."""
    for comment in pr.get_issue_comments():
        if BOT_MARKER in (comment.body or ""):
            return comment
    return None


def post_or_update_comment(pr, body: str) -> str:
    """Edit the existing promptlens comment in place, or create one.

    Returns "updated" or "created".
    """
    existing = find_bot_comment(pr)
    if existing is not None:
        existing.edit(body)
        logger.info("Updated existing PR comment (id: %s)", existing.id)
        return "updated"
    pr.create_issue_comment(body)
    logger.info("Created new PR comment")
    return "created"


def post_review_verdict(pr, event: str, body: str) -> bool:
    """Post a PR review with ``event``; GitHub pins it to the current head commit.

    Failure is logged and reported as False rather than raised: the detailed
    comment has already been posted by this point.
    """
    try:
        pr.create_review(body=body, event=event)
    except GithubException as e:
        logger.warning("Failed to post review verdict: %s", e)
        return False
    logger.info("Posted review verdict: %s", event)
    return True
