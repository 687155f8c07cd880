"""Sync orchestrator: the per-run package synchronization pipeline."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .builder import BuildOptions, MakepkgBuilder
from .cache import package_dir
from .classifier import DependencyClassifier
from .config import Config
from .confirm import ConfirmationProvider
from .errors import AurSyncError, MergeConflicts
from .git_sync import PackageState, SyncOutcome, ensure_present, refresh
from .pacman import Pacman
from .performance import PerformanceLogger
from .rpc import AurRpcClient, Package

WILDCARD = "*"


@dataclass
class SyncRequest:
    """Packages to synchronize and the flags controlling the run."""
    packages: List[str]
    deps: List[str] = field(default_factory=list)
    as_deps: bool = False
    refresh: bool = True
    upgrade: bool = False
    sync_deps: bool = False
    rm_deps: bool = False
    clean: bool = False
    no_confirm: bool = False
    ignore_errors: bool = False
    make_explicit: bool = False

    def build_options(self, install_as_dependency: bool) -> BuildOptions:
        return BuildOptions(
            sync_missing_deps=self.sync_deps,
            remove_build_deps_on_success=self.rm_deps,
            clean_after=self.clean,
            install_as_dependency=install_as_dependency,
            skip_confirmation=self.no_confirm,
        )


@dataclass
class SyncReport:
    """Aggregated outcome of a sync run."""
    explicit: List[str] = field(default_factory=list)
    dependency: List[str] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[Tuple[str, Exception]] = field(default_factory=list)
    outcomes: Dict[str, SyncOutcome] = field(default_factory=dict)
    cancelled: bool = False
    aborted: bool = False

    @property
    def failed_names(self) -> List[str]:
        return [name for name, _ in self.failed]

    @property
    def success(self) -> bool:
        return not self.failed and not self.cancelled

    def summary(self) -> str:
        if not self.succeeded and not self.failed:
            return "0 succeeded (nothing to do)"
        return f"{len(self.succeeded)} succeeded, {len(self.failed)} failed"


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


class SyncOrchestrator:
    """
    Drives one sync run over a package set.

    Steps, in order:
    1. Resolve the request, expanding ``*`` to all foreign packages
    2. Split names into explicit and dependency roles
    3. Fetch AUR metadata for both sets
    4. Ask for confirmation
    5. For each package (dependencies first): clone or refresh its working
       copy, then build and install it when something changed or an upgrade
       was requested
    6. Aggregate successes and failures, stopping at the first failure
       unless errors are ignored
    """

    def __init__(
        self,
        config: Config,
        package_manager: Pacman,
        provider: AurRpcClient,
        builder: MakepkgBuilder,
        confirmation: ConfirmationProvider,
        perf_logger: Optional[PerformanceLogger] = None
    ):
        self.config = config
        self.package_manager = package_manager
        self.provider = provider
        self.builder = builder
        self.confirmation = confirmation
        self.classifier = DependencyClassifier(package_manager)
        self.perf_logger = perf_logger or PerformanceLogger()
        self.logger = logging.getLogger('aursync.sync')

    def resolve(self, packages: List[str]) -> List[str]:
        """Replace a wildcard request with all foreign-installed packages; drop duplicates."""
        if any(name.strip() == WILDCARD for name in packages):
            packages = self.package_manager.foreign_packages()
            self.logger.debug(f"Wildcard resolved to {len(packages)} foreign packages")
        return list(dict.fromkeys(name.strip() for name in packages if name.strip()))

    def split(self, request: SyncRequest, names: List[str]) -> Tuple[List[str], List[str]]:
        """
        Split resolved names into (explicit, dependency) lists in request order.

        Names given through ``request.deps`` are always dependencies.
        """
        extra_deps = [name for name in dict.fromkeys(request.deps) if name]

        if request.make_explicit:
            dependency_set = set()
        else:
            _, dependency_set = self.classifier.classify(names)

        dependency = [name for name in names if name in dependency_set]
        dependency += [name for name in extra_deps if name not in dependency]
        explicit = [name for name in names if name not in dependency]
        return explicit, dependency

    def fetch_metadata(self, names: List[str]) -> Dict[str, Package]:
        """Fetch metadata in request order; packages unknown upstream are left out."""
        if not names:
            return {}
        info = self.provider.info(names)
        for name in names:
            if name not in info:
                self.logger.debug(f"Skipping {name}: not found in the AUR")
        return {name: info[name] for name in names if name in info}

    def _confirm(self, request: SyncRequest, explicit: List[str], dependency: List[str]) -> bool:
        lines = [f"Installing{' / Upgrading' if request.upgrade else ''}: {explicit}"]
        if dependency:
            lines.append(f"Dependencies: {dependency}")

        if request.no_confirm:
            for line in lines:
                self.logger.info(line)
            return True

        return self.confirmation.confirm("\n".join(lines + ["Continue?"]))

    def sync_package(self, name: str, request: SyncRequest, as_dependency: bool) -> SyncOutcome:
        """
        Bring one package's working copy up to date and install it if needed.

        Errors are recorded on the returned outcome rather than raised.
        """
        cache_root = self.config.cache_dir
        remote_url = self.config.package_url(name)
        outcome = SyncOutcome(package=name, upgrade_requested=request.upgrade)

        try:
            with self.perf_logger.time_operation(f"sync {name}"):
                present = ensure_present(cache_root, name, remote_url, self.config.branch)
                if present.cloned:
                    self.logger.info(f"Cloned {name}")
                    outcome.cloned = True
                    outcome.state = PackageState.CLONED
                elif request.refresh:
                    self.logger.info(f"Pulling {name}...")
                    result = refresh(
                        package_dir(cache_root, name),
                        remote_url,
                        self.config.branch,
                        self.config.fetch_timeout,
                    )
                    outcome.analysis = result.analysis
                    outcome.pulled_with_changes = result.changed
                    outcome.state = PackageState.PULLED_CHANGED if result.changed else PackageState.PULLED_NO_CHANGE
        except MergeConflicts as e:
            outcome.state = PackageState.MERGE_CONFLICTED
            outcome.error = e
            return outcome
        except (AurSyncError, OSError) as e:
            outcome.state = PackageState.SYNC_FAILED
            outcome.error = e
            return outcome

        if not outcome.would_install:
            outcome.state = PackageState.SKIPPED
            return outcome

        options = request.build_options(as_dependency or request.as_deps)
        try:
            with self.perf_logger.time_operation(f"build {name}"):
                self.builder.build_and_install(package_dir(cache_root, name), options)
        except AurSyncError as e:
            outcome.state = PackageState.INSTALL_FAILED
            outcome.error = e
            return outcome

        outcome.state = PackageState.INSTALLED
        return outcome

    def run(self, request: SyncRequest) -> SyncReport:
        """
        Execute a full sync run.

        Raises:
            AurSyncError: resolving, classifying or fetching metadata failed;
                nothing has been changed at that point
        """
        names = self.resolve(request.packages)
        explicit, dependency = self.split(request, names)

        report = SyncReport(explicit=explicit, dependency=dependency)

        explicit_info = self.fetch_metadata(explicit)
        dependency_info = self.fetch_metadata(dependency)

        if not self._confirm(request, explicit, dependency):
            self.logger.info("Sync cancelled, no changes made")
            report.cancelled = True
            return report

        queue = [(name, True) for name in dependency_info] + [(name, False) for name in explicit_info]
        total = len(queue)

        for index, (name, as_dependency) in enumerate(queue, start=1):
            self.logger.info(f"Syncing {name} ({index}/{total})...")
            outcome = self.sync_package(name, request, as_dependency)
            report.outcomes[name] = outcome

            if outcome.error is not None:
                self.logger.error(f"Failed to sync {name}: {outcome.error}")
                report.failed.append((name, outcome.error))
                if not request.ignore_errors:
                    report.aborted = True
                    break
            elif outcome.state == PackageState.INSTALLED:
                report.succeeded.append(name)
            else:
                report.skipped.append(name)

        self._log_report(report)
        return report

    def _log_report(self, report: SyncReport) -> None:
        if report.failed:
            self.logger.error(
                f"Failed to sync {len(report.failed)} package{_plural(len(report.failed))}: "
                f"{[f'{name}: {error}' for name, error in report.failed]}"
            )
        if report.succeeded:
            self.logger.info(
                f"Synced {len(report.succeeded)} package{_plural(len(report.succeeded))}: {report.succeeded}"
            )
        if report.aborted:
            self.logger.warning("Stopped after the first failure; use --ignore-errors to continue past failures")
        self.perf_logger.log_performance_summary()
        self.logger.info(report.summary())
