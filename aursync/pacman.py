"""External command execution and the pacman package manager client."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import NotInstalled, PackageManagerInvocationFailed


@dataclass
class CommandResult:
    """Exit status and captured output of an external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs external commands synchronously.

    With ``capture`` the output is collected and returned; without it the
    command inherits the terminal streams, so interactive prompts reach the
    user.
    """

    def __init__(self):
        self.logger = logging.getLogger('aursync.runner')

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[Path] = None,
        capture: bool = True
    ) -> CommandResult:
        """
        Run ``command`` with ``args`` and wait for it to finish.

        Raises:
            OSError: the command could not be started
        """
        argv = [command, *args]
        self.logger.debug(f"Running {argv} in {cwd or Path.cwd()}")

        if capture:
            completed = subprocess.run(argv, cwd=cwd, capture_output=True, text=True)
            return CommandResult(completed.returncode, completed.stdout, completed.stderr)

        completed = subprocess.run(argv, cwd=cwd)
        return CommandResult(completed.returncode)


class Pacman:
    """Read-only queries against the pacman installed-package database."""

    def __init__(self, runner: Optional[CommandRunner] = None, executable: str = "pacman"):
        self.runner = runner or CommandRunner()
        self.executable = executable
        self.logger = logging.getLogger('aursync.pacman')

    def _query(self, args: List[str]) -> CommandResult:
        try:
            return self.runner.run(self.executable, args)
        except OSError as e:
            raise PackageManagerInvocationFailed(f"pacman command failed: {e}") from e

    def installed_version(self, name: str) -> str:
        """
        Get the installed version of a package.

        Raises:
            NotInstalled: pacman has no such package installed
        """
        result = self._query(["-Q", name])
        if not result.success:
            raise NotInstalled(name)

        self.logger.debug(f"{name} :: {result.stdout.strip()}")
        fields = result.stdout.split()
        if len(fields) < 2:
            raise NotInstalled(name)
        return fields[1].strip()

    def is_installed(self, name: str) -> bool:
        try:
            self.installed_version(name)
        except NotInstalled:
            return False
        return True

    def is_dependency(self, name: str) -> bool:
        """
        Check whether a package is recorded as installed as a dependency.

        Raises:
            NotInstalled: pacman reported an error for the name
        """
        result = self._query(["-Qd", name])
        if result.success:
            return True

        message = (result.stdout.strip() or result.stderr.strip()).lower()
        if message.startswith("error"):
            raise NotInstalled(name)
        return False

    def foreign_packages(self) -> List[str]:
        """
        List the names of all foreign (non-repository) installed packages.

        Raises:
            PackageManagerInvocationFailed: pacman exited with an error
        """
        result = self._query(["-Qqm"])
        if not result.success:
            raise PackageManagerInvocationFailed(f"pacman -Qqm exited with status {result.returncode}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
