"""Error types for aursync package synchronization."""

from enum import Enum
from typing import List, Optional


class ErrorCategory(Enum):
    """Categories of errors for structured error handling."""
    PACKAGE_MANAGER = "package_manager"
    GIT_SYNC = "git_sync"
    MERGE_CONFLICT = "merge_conflict"
    BUILD = "build"
    PROVIDER = "provider"
    VALIDATION = "validation"


class AurSyncError(Exception):
    """Base class for all aursync errors."""

    error_code = "AURSYNC_ERROR"
    category = ErrorCategory.GIT_SYNC

    def __init__(self, message: str, package: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.package = package

    def to_dict(self) -> dict:
        """Convert the error to a dictionary for reporting."""
        result = {
            "error_code": self.error_code,
            "category": self.category.value,
            "message": self.message,
        }
        if self.package:
            result["package"] = self.package
        return result


class NotInstalled(AurSyncError):
    """The package manager has no record of the package."""

    error_code = "NOT_INSTALLED"
    category = ErrorCategory.PACKAGE_MANAGER

    def __init__(self, package: str):
        super().__init__(f"package not installed: {package}", package)


class PackageManagerInvocationFailed(AurSyncError):
    """The package manager could not run or returned an unexpected status."""

    error_code = "PACMAN_FAILED"
    category = ErrorCategory.PACKAGE_MANAGER


class SyncError(AurSyncError):
    """A version-control operation failed."""

    error_code = "SYNC_FAILED"
    category = ErrorCategory.GIT_SYNC


class CloneFailed(SyncError):
    error_code = "GIT_CLONE_FAILED"


class FetchFailed(SyncError):
    error_code = "FETCH_FAILED"


class MergeConflicts(SyncError):
    """A three-way merge left unresolved conflicts in the working copy."""

    error_code = "MERGE_CONFLICTS"
    category = ErrorCategory.MERGE_CONFLICT

    def __init__(self, package: Optional[str] = None, paths: Optional[List[str]] = None):
        self.paths = list(paths or [])
        message = "merge conflicts detected"
        if self.paths:
            message = f"{message}: {', '.join(self.paths)}"
        super().__init__(message, package)


class BuildOrInstallFailed(AurSyncError):
    error_code = "INSTALL_FAILED"
    category = ErrorCategory.BUILD


class ProviderError(AurSyncError):
    """The package-information provider could not answer a query."""

    error_code = "PROVIDER_FAILED"
    category = ErrorCategory.PROVIDER


class UnrecognizedField(AurSyncError):
    error_code = "UNRECOGNIZED_FIELD"
    category = ErrorCategory.VALIDATION

    def __init__(self, field: str):
        super().__init__(f"unrecognized query field: {field}")
        self.field = field
