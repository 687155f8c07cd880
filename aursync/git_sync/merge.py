"""Fast-forward and three-way merge of fetched package history."""

import logging

from git import Commit, Repo, GitCommandError

from ..errors import SyncError
from .utils import MergeResult


def fast_forward(repo: Repo, branch: str, fetched: Commit) -> None:
    """
    Move ``branch`` to ``fetched`` and force the working tree to match.

    Local modifications to tracked files are discarded; working copies are not
    expected to be edited by hand between runs.
    """
    logger = logging.getLogger('aursync.git_sync.merge')

    head = repo.heads[branch]
    msg = f"Fast-Forward: Setting {head.path} to id: {fetched.hexsha}"
    logger.info(msg)

    head.set_commit(fetched, logmsg=msg)
    repo.head.reference = head
    repo.head.reset(index=True, working_tree=True)


def checkout_unborn(repo: Repo, branch: str, fetched: Commit) -> None:
    """Create ``branch`` at ``fetched`` in a repository with no local history and check it out."""
    logger = logging.getLogger('aursync.git_sync.merge')
    logger.info(f"Creating {branch} at {fetched.hexsha}")

    head = repo.create_head(branch, fetched)
    repo.head.reference = head
    repo.head.reset(index=True, working_tree=True)


def three_way_merge(repo: Repo, local: Commit, remote: Commit) -> MergeResult:
    """
    Merge ``remote`` into the currently checked-out ``local`` commit.

    The merged tree is computed from the merge base and both tips without
    touching the working copy. On conflicts the conflicted tree (with conflict
    markers) is checked out for inspection, but no commit is created and the
    branch is left where it was. Otherwise a merge commit with parents
    (local, remote) becomes the new branch head.

    Args:
        repo: Working copy repository with ``local`` checked out
        local: Local branch tip
        remote: Fetched commit

    Returns:
        MergeResult with the merge commit id or the conflicting paths

    Raises:
        SyncError: no common ancestor, or git failed to compute the merge
    """
    logger = logging.getLogger('aursync.git_sync.merge')

    bases = repo.merge_base(local, remote)
    if not bases:
        raise SyncError(f"no merge base between {local.hexsha[:12]} and {remote.hexsha[:12]}")
    base = bases[0]
    logger.debug(f"Merge base of {local.hexsha[:12]} and {remote.hexsha[:12]}: {base.hexsha[:12]}")

    status, stdout, stderr = repo.git.merge_tree(
        "--write-tree", "--name-only", "--no-messages",
        f"--merge-base={base.hexsha}",
        local.hexsha, remote.hexsha,
        with_extended_output=True,
        with_exceptions=False,
    )
    # exit status 0 is a clean merge, 1 means conflicts, anything else is an error
    if status not in (0, 1):
        raise SyncError(f"git merge-tree failed: {stderr.strip()}")

    lines = stdout.splitlines()
    tree_id = lines[0].strip()

    if status == 1:
        conflicts = [line.strip() for line in lines[1:] if line.strip()]
        logger.warning(f"Merge conflicts detected in: {conflicts}")
        try:
            repo.git.read_tree("--reset", "-u", tree_id)
        except GitCommandError as e:
            raise SyncError(f"failed to check out conflicted tree: {e}") from e
        return MergeResult(conflicts=conflicts)

    msg = f"Merge: {remote.hexsha} into {local.hexsha}"
    merge_commit = Commit.create_from_tree(
        repo,
        repo.tree(tree_id),
        msg,
        parent_commits=[local, remote],
        head=True,
    )
    repo.head.reset(index=True, working_tree=True)
    logger.info(f"Created merge commit {merge_commit.hexsha[:12]}")
    return MergeResult(merge_commit=merge_commit.hexsha)
