"""Helpers for building throwaway package repositories in tests."""

from pathlib import Path
from typing import Dict

from git import Commit, Repo


def init_repository(path: Path, files: Dict[str, str] = None, message: str = "Initial commit") -> Repo:
    """Create a repository on branch master, optionally with a first commit."""
    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(path, initial_branch="master")
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    if files:
        commit_files(repo, files, message)
    return repo


def commit_files(repo: Repo, files: Dict[str, str], message: str) -> Commit:
    """Write files into the working tree and commit them."""
    root = Path(repo.working_tree_dir)
    for name, content in files.items():
        (root / name).write_text(content)
    repo.index.add(list(files))
    return repo.index.commit(message)


def pkgbuild(pkgver: str = "1.0", pkgrel: str = "1") -> str:
    return f"pkgname=foo\npkgver={pkgver}\npkgrel={pkgrel}\narch=('any')\n"
