"""Build and install driver invoking makepkg."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import BuildOrInstallFailed
from .pacman import CommandRunner


@dataclass
class BuildOptions:
    """Behaviour flags passed to the build tool."""
    sync_missing_deps: bool = False
    remove_build_deps_on_success: bool = False
    clean_after: bool = False
    install_as_dependency: bool = False
    skip_confirmation: bool = False

    def to_args(self) -> List[str]:
        """Translate the options into makepkg arguments."""
        args = ["-i", "--needed"]
        if self.sync_missing_deps:
            args.append("-s")
        if self.remove_build_deps_on_success:
            args.append("-r")
        if self.clean_after:
            args.append("-c")
        if self.install_as_dependency:
            args.append("--asdeps")
        if self.skip_confirmation:
            args.append("--noconfirm")
        return args


class MakepkgBuilder:
    """Builds a synchronized working copy and installs the result."""

    def __init__(self, runner: Optional[CommandRunner] = None, executable: str = "makepkg"):
        self.runner = runner or CommandRunner()
        self.executable = executable
        self.logger = logging.getLogger('aursync.builder')

    def build_and_install(self, working_copy: Path, options: BuildOptions) -> None:
        """
        Run makepkg in ``working_copy`` with the terminal attached.

        Raises:
            BuildOrInstallFailed: makepkg could not start or exited non-zero
        """
        args = options.to_args()
        self.logger.debug(f"Spawning {self.executable} {' '.join(args)} in {working_copy}")

        try:
            result = self.runner.run(self.executable, args, cwd=working_copy, capture=False)
        except OSError as e:
            raise BuildOrInstallFailed(f"makepkg failed to start: {e}", Path(working_copy).name) from e

        if not result.success:
            raise BuildOrInstallFailed(
                f"makepkg failed with exit status {result.returncode}",
                Path(working_copy).name
            )
