"""Explicit/dependency role classification of requested packages."""

import logging
from enum import Enum
from typing import Iterable, Set, Tuple

from .errors import AurSyncError, NotInstalled
from .pacman import Pacman


class DependencyRole(Enum):
    """Role a package plays in a sync run."""
    EXPLICIT = "explicit"
    DEPENDENCY = "dependency"


class DependencyClassifier:
    """Partitions package names by their recorded install reason."""

    def __init__(self, package_manager: Pacman):
        self.package_manager = package_manager
        self.logger = logging.getLogger('aursync.classifier')

    def role(self, name: str) -> DependencyRole:
        """
        Role of a single package.

        Packages that are not installed, or whose install reason cannot be
        determined, are explicit.
        """
        try:
            if self.package_manager.is_dependency(name):
                return DependencyRole.DEPENDENCY
        except NotInstalled:
            self.logger.debug(f"{name} is not installed, treating as explicit")
        except AurSyncError as e:
            self.logger.warning(f"Could not classify {name}, treating as explicit: {e}")
        return DependencyRole.EXPLICIT

    def classify(self, names: Iterable[str]) -> Tuple[Set[str], Set[str]]:
        """
        Split names into (explicit, dependency) sets.

        Args:
            names: Requested package names

        Returns:
            Tuple of (explicit, dependency) name sets
        """
        explicit: Set[str] = set()
        dependency: Set[str] = set()

        for name in names:
            if self.role(name) == DependencyRole.DEPENDENCY:
                dependency.add(name)
            else:
                explicit.add(name)

        self.logger.debug(f"Classified {len(explicit)} explicit, {len(dependency)} dependency packages")
        return explicit, dependency
