"""Fetch and reconcile operations for package working copies using GitPython."""

import logging
from pathlib import Path
from typing import Optional

from git import Commit, Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..errors import FetchFailed, MergeConflicts, SyncError
from .analysis import MergeAnalysis, analyze_merge, local_head
from .merge import checkout_unborn, fast_forward, three_way_merge
from .utils import RefreshResult


def open_working_copy(local_copy: Path) -> Repo:
    """Open a cached working copy, mapping GitPython errors to SyncError."""
    try:
        return Repo(local_copy)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise SyncError(f"not a git working copy: {local_copy}", Path(local_copy).name) from e


def fetch_remote_head(repo: Repo, remote_url: str, branch: str, timeout: Optional[float] = None) -> Commit:
    """
    Fetch ``branch`` from ``remote_url`` into FETCH_HEAD.

    Args:
        repo: Working copy repository
        remote_url: Git endpoint of the package
        branch: Branch to fetch
        timeout: Seconds after which the fetch is killed (None waits forever)

    Returns:
        The fetched commit

    Raises:
        FetchFailed: the fetch failed or timed out
    """
    logger = logging.getLogger('aursync.git_sync.operations')
    logger.debug(f"Fetching {branch} from {remote_url}")

    try:
        repo.git.fetch("--no-tags", remote_url, branch, kill_after_timeout=timeout)
        fetched_sha = repo.git.rev_parse("FETCH_HEAD^{commit}")
    except GitCommandError as e:
        error_msg = f"Failed to fetch from remote: {e.stderr.strip() if e.stderr else e}"
        logger.error(error_msg)
        raise FetchFailed(error_msg) from e

    return repo.commit(fetched_sha)


def refresh(local_copy: Path, remote_url: str, branch: str = "master", timeout: Optional[float] = None) -> RefreshResult:
    """
    Fetch a package's branch and bring the working copy up to date.

    This function performs the following operations:
    1. Fetches the branch head from the remote into FETCH_HEAD
    2. Analyzes the fetched commit against the local branch head
    3. Does nothing when up to date, fast-forwards when possible,
       three-way merges when histories diverged, and checks out the
       fetched commit when the branch has no local history yet

    Args:
        local_copy: Working copy directory
        remote_url: Git endpoint of the package
        branch: Branch to synchronize
        timeout: Seconds after which the fetch is killed

    Returns:
        RefreshResult; ``changed`` is False only when already up to date

    Raises:
        FetchFailed: the fetch failed or timed out
        MergeConflicts: the merge conflicted; the working copy holds the conflicted tree
        SyncError: any other git failure
    """
    logger = logging.getLogger('aursync.git_sync.operations')
    name = Path(local_copy).name
    repo = open_working_copy(local_copy)

    try:
        fetched = fetch_remote_head(repo, remote_url, branch, timeout)
    except FetchFailed as e:
        e.package = name
        raise

    analysis = analyze_merge(repo, branch, fetched)

    try:
        if analysis == MergeAnalysis.UP_TO_DATE:
            logger.info(f"{name} is already up to date")
            return RefreshResult(changed=False, analysis=analysis, head=local_head(repo, branch).hexsha)

        if analysis == MergeAnalysis.UNBORN:
            checkout_unborn(repo, branch, fetched)
            return RefreshResult(changed=True, analysis=analysis, head=fetched.hexsha)

        if repo.head.is_detached or repo.active_branch.name != branch:
            raise SyncError(f"working copy {local_copy} does not have {branch} checked out", name)

        if analysis == MergeAnalysis.FAST_FORWARDABLE:
            fast_forward(repo, branch, fetched)
            return RefreshResult(changed=True, analysis=analysis, head=fetched.hexsha)

        result = three_way_merge(repo, local_head(repo, branch), fetched)
    except GitCommandError as e:
        raise SyncError(f"Git command error during synchronization: {e}", name) from e

    if result.conflicted:
        raise MergeConflicts(name, result.conflicts)

    return RefreshResult(
        changed=True,
        analysis=analysis,
        head=result.merge_commit,
        merge_commit=result.merge_commit,
    )
