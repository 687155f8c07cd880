"""Package cache inspection and cleanup."""

import logging
import shutil
from pathlib import Path
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .confirm import ConfirmationProvider
    from .pacman import Pacman
    from .rpc import AurRpcClient


def package_dir(cache_root: Path, name: str) -> Path:
    """Working copy location of a package inside the cache root."""
    return Path(cache_root) / name


def exists(cache_root: Path, name: str) -> bool:
    """Check whether a working copy for ``name`` is cached."""
    return package_dir(cache_root, name).exists()


def list_cached(cache_root: Path) -> List[str]:
    """List the package names that have a directory in the cache root."""
    cache_root = Path(cache_root)
    if not cache_root.exists():
        return []
    return sorted(entry.name for entry in cache_root.iterdir() if entry.is_dir())


def clean_cache(
    cache_root: Path,
    provider: "AurRpcClient",
    package_manager: "Pacman",
    confirmation: "ConfirmationProvider",
    only_uninstalled: bool = False,
    ignore_errors: bool = False
) -> int:
    """
    Delete cached working copies of AUR packages.

    Only directories whose name is a package known to the AUR are considered.

    Args:
        cache_root: Cache root directory
        provider: Package-information provider used to recognise AUR packages
        package_manager: Used to skip installed packages when only_uninstalled
        confirmation: Asked once per directory before deleting it
        only_uninstalled: Keep working copies of installed packages
        ignore_errors: Log failed deletions and continue instead of raising

    Returns:
        Number of deleted cache directories
    """
    logger = logging.getLogger('aursync.cache')

    known = provider.info(list_cached(cache_root))
    deleted = 0

    for name in sorted(known):
        if only_uninstalled and package_manager.is_installed(name):
            logger.debug(f"Keeping {name}: installed")
            continue

        target = package_dir(cache_root, name)
        if not confirmation.confirm(f"Delete {target}?"):
            continue

        logger.info(f"Deleting {target}")
        try:
            shutil.rmtree(target)
            deleted += 1
        except OSError as e:
            if not ignore_errors:
                raise
            logger.error(f"Delete failed, skipping: {e}")

    return deleted
