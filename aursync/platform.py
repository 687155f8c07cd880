"""Platform and tool availability helpers for aursync."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from git import Git, GitCommandError, GitCommandNotFound

# `git merge-tree --write-tree --merge-base=<commit>` first shipped in 2.40
MIN_GIT_VERSION = (2, 40)


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize a path for the current platform.

    Args:
        path: Path to normalize

    Returns:
        Normalized Path object
    """
    if isinstance(path, str):
        path = Path(path)

    # Expand user home directory (~) first, then resolve to absolute path
    return path.expanduser().resolve()


def get_git_version() -> Tuple[int, ...]:
    """Get the version of the git executable GitPython will call."""
    return Git().version_info


def validate_git_availability(min_version: Tuple[int, ...] = MIN_GIT_VERSION) -> Tuple[bool, Optional[str]]:
    """
    Validate that a recent enough Git is available.

    Args:
        min_version: Lowest acceptable (major, minor) version

    Returns:
        Tuple of (is_available, error_message)
    """
    logger = logging.getLogger('aursync.platform')

    try:
        version = get_git_version()
    except GitCommandNotFound:
        return False, "Git executable 'git' not found"
    except GitCommandError as e:
        return False, f"Git command failed: {e}"

    logger.debug(f"Detected git version {'.'.join(str(v) for v in version)}")

    if tuple(version[:len(min_version)]) < tuple(min_version):
        wanted = '.'.join(str(v) for v in min_version)
        found = '.'.join(str(v) for v in version)
        return False, f"Git {wanted} or newer is required, found {found}"

    return True, None
