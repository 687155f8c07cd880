"""Result types for Git synchronization operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .analysis import MergeAnalysis


class PackageState(Enum):
    """Where a package ended up in a sync run."""
    CLONED = "cloned"
    PULLED_NO_CHANGE = "pulled_no_change"
    PULLED_CHANGED = "pulled_changed"
    MERGE_CONFLICTED = "merge_conflicted"
    SYNC_FAILED = "sync_failed"
    SKIPPED = "skipped"
    INSTALLED = "installed"
    INSTALL_FAILED = "install_failed"


@dataclass
class MergeResult:
    """Outcome of reconciling divergent histories with a three-way merge."""
    merge_commit: Optional[str] = None
    conflicts: List[str] = field(default_factory=list)

    @property
    def conflicted(self) -> bool:
        return self.merge_commit is None


@dataclass
class RefreshResult:
    """Result of fetching a package's branch and reconciling local history."""
    changed: bool
    analysis: "MergeAnalysis"
    head: str
    merge_commit: Optional[str] = None


@dataclass
class SyncOutcome:
    """Per-package result of the sync step."""
    package: str
    cloned: bool = False
    pulled_with_changes: bool = False
    upgrade_requested: bool = False
    analysis: Optional["MergeAnalysis"] = None
    state: Optional[PackageState] = None
    error: Optional[Exception] = None

    @property
    def would_install(self) -> bool:
        """Whether the build/install driver should run for this package."""
        return self.cloned or self.pulled_with_changes or self.upgrade_requested

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def error_code(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, "error_code", "UNEXPECTED_ERROR")
