"""Working copy cloning for package synchronization using GitPython."""

import logging
import shutil
from pathlib import Path

from git import Repo, GitCommandError

from ..cache import exists, package_dir
from ..errors import CloneFailed
from .utils import PackageState, SyncOutcome


def clone_package(remote_url: str, target: Path, branch: str) -> Repo:
    """
    Clone a package's single branch into ``target``.

    A failed clone leaves no directory behind, so the cache never holds a
    half-written working copy.

    Args:
        remote_url: Git endpoint of the package
        target: Directory to clone into (must not exist)
        branch: Branch to clone

    Returns:
        The cloned repository

    Raises:
        CloneFailed: git could not clone the remote
    """
    logger = logging.getLogger('aursync.git_sync.clone')

    target.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Cloning repository from {remote_url}")

    try:
        repo = Repo.clone_from(remote_url, target, branch=branch, single_branch=True)
    except GitCommandError as e:
        if target.exists():
            shutil.rmtree(target, ignore_errors=True)
        error_msg = f"Git clone failed: {e.stderr.strip() if e.stderr else e}"
        logger.error(error_msg)
        raise CloneFailed(error_msg, target.name) from e

    _ensure_identity(repo)
    logger.debug(f"Cloned {remote_url} at {repo.head.commit.hexsha[:12]}")
    return repo


def _ensure_identity(repo: Repo) -> None:
    """Give the working copy a committer identity for merge commits if none is configured."""
    reader = repo.config_reader()
    with repo.config_writer() as writer:
        if not reader.get_value("user", "name", ""):
            writer.set_value("user", "name", "aursync")
        if not reader.get_value("user", "email", ""):
            writer.set_value("user", "email", "aursync@localhost")


def ensure_present(cache_root: Path, name: str, remote_url: str, branch: str = "master") -> SyncOutcome:
    """
    Make sure a working copy of ``name`` exists in the cache.

    Args:
        cache_root: Cache root directory
        name: Package name
        remote_url: Git endpoint of the package
        branch: Branch to clone when the working copy is absent

    Returns:
        SyncOutcome with ``cloned`` set when a clone was performed

    Raises:
        CloneFailed: the package was absent and could not be cloned
    """
    if exists(cache_root, name):
        return SyncOutcome(package=name)

    clone_package(remote_url, package_dir(cache_root, name), branch)
    return SyncOutcome(package=name, cloned=True, state=PackageState.CLONED)
