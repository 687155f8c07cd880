"""Merge analysis between a local branch head and a fetched commit."""

import logging
from enum import Enum
from typing import Optional

from git import Commit, Repo


class MergeAnalysis(Enum):
    """How a fetched commit relates to the local branch head."""
    UP_TO_DATE = "up_to_date"               # Fetched commit already in local history
    FAST_FORWARDABLE = "fast_forwardable"   # Local head is an ancestor of the fetched commit
    DIVERGENT = "divergent"                 # Both sides have commits the other lacks
    UNBORN = "unborn"                       # No local commit yet


def local_head(repo: Repo, branch: str) -> Optional[Commit]:
    """Return the commit ``branch`` points at, or None when it is unborn."""
    for head in repo.heads:
        if head.name == branch:
            return head.commit
    return None


def analyze_merge(repo: Repo, branch: str, fetched: Commit) -> MergeAnalysis:
    """
    Classify the relationship between the local branch and a fetched commit.

    The analysis is recomputed on every call; nothing is cached because each
    fetch can move the remote side.

    Args:
        repo: Working copy repository
        branch: Local branch the fetched commit would be merged into
        fetched: Commit fetched from the remote

    Returns:
        MergeAnalysis for the pair
    """
    logger = logging.getLogger('aursync.git_sync.analysis')

    local = local_head(repo, branch)
    if local is None:
        analysis = MergeAnalysis.UNBORN
    elif local.hexsha == fetched.hexsha or repo.is_ancestor(fetched, local):
        analysis = MergeAnalysis.UP_TO_DATE
    elif repo.is_ancestor(local, fetched):
        analysis = MergeAnalysis.FAST_FORWARDABLE
    else:
        analysis = MergeAnalysis.DIVERGENT

    logger.debug(f"Merge analysis for {branch} against {fetched.hexsha[:12]}: {analysis.value}")
    return analysis
