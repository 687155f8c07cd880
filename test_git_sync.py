#!/usr/bin/env python3
"""
Tests for the version-control sync primitive.

Every test works against real repositories in a temporary directory: a
"remote" package repository and a cached working copy cloned from it.
"""

import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent))

from git import GitCommandError, Repo

from aursync.errors import CloneFailed, FetchFailed, MergeConflicts, SyncError
from aursync.git_sync import MergeAnalysis, analyze_merge, ensure_present, refresh
from aursync.git_sync.operations import fetch_remote_head
from git_fixtures import commit_files, init_repository, pkgbuild


class GitSyncTestCase(unittest.TestCase):
    """Shared setup: a remote repository for package foo and an empty cache."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.remotes = self.temp_dir / "remotes"
        self.cache = self.temp_dir / "cache"
        self.remote_url = str(self.remotes / "foo")
        self.remote = init_repository(self.remotes / "foo", {"PKGBUILD": pkgbuild()})
        self.working_copy = self.cache / "foo"

    def tearDown(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def clone(self) -> Repo:
        ensure_present(self.cache, "foo", self.remote_url)
        return Repo(self.working_copy)


class TestEnsurePresent(GitSyncTestCase):

    def test_absent_package_is_cloned_at_remote_head(self):
        outcome = ensure_present(self.cache, "foo", self.remote_url)

        self.assertTrue(outcome.cloned)
        self.assertTrue(outcome.would_install)
        local = Repo(self.working_copy)
        self.assertEqual(local.head.commit.hexsha, self.remote.head.commit.hexsha)
        self.assertEqual(local.active_branch.name, "master")
        self.assertEqual((self.working_copy / "PKGBUILD").read_text(), pkgbuild())

    def test_cached_package_is_not_cloned_again(self):
        self.clone()
        commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")

        outcome = ensure_present(self.cache, "foo", self.remote_url)

        self.assertFalse(outcome.cloned)
        self.assertFalse(outcome.would_install)
        self.assertEqual((self.working_copy / "PKGBUILD").read_text(), pkgbuild())

    def test_clone_failure_raises_and_leaves_no_directory(self):
        with self.assertRaises(CloneFailed) as ctx:
            ensure_present(self.cache, "missing", str(self.remotes / "missing"))

        self.assertEqual(ctx.exception.error_code, "GIT_CLONE_FAILED")
        self.assertFalse((self.cache / "missing").exists())


class TestMergeAnalysis(GitSyncTestCase):

    def test_same_commit_is_up_to_date(self):
        local = self.clone()
        fetched = fetch_remote_head(local, self.remote_url, "master")

        self.assertEqual(analyze_merge(local, "master", fetched), MergeAnalysis.UP_TO_DATE)

    def test_remote_ahead_is_fast_forwardable(self):
        local = self.clone()
        commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")
        fetched = fetch_remote_head(local, self.remote_url, "master")

        self.assertEqual(analyze_merge(local, "master", fetched), MergeAnalysis.FAST_FORWARDABLE)

    def test_both_sides_ahead_is_divergent(self):
        local = self.clone()
        commit_files(local, {"fix.patch": "patch\n"}, "Local patch")
        commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")
        fetched = fetch_remote_head(local, self.remote_url, "master")

        self.assertEqual(analyze_merge(local, "master", fetched), MergeAnalysis.DIVERGENT)

    def test_missing_branch_is_unborn(self):
        local = init_repository(self.working_copy)
        fetched = fetch_remote_head(local, self.remote_url, "master")

        self.assertEqual(analyze_merge(local, "master", fetched), MergeAnalysis.UNBORN)


class TestRefresh(GitSyncTestCase):

    def test_up_to_date_refresh_changes_nothing(self):
        local = self.clone()
        head = local.head.commit.hexsha

        for _ in range(3):
            result = refresh(self.working_copy, self.remote_url, "master")
            self.assertFalse(result.changed)
            self.assertEqual(result.analysis, MergeAnalysis.UP_TO_DATE)
            self.assertEqual(result.head, head)

        self.assertEqual(Repo(self.working_copy).head.commit.hexsha, head)
        self.assertFalse(Repo(self.working_copy).is_dirty(untracked_files=True))

    def test_remote_behind_local_is_up_to_date(self):
        local = self.clone()
        local_commit = commit_files(local, {"fix.patch": "patch\n"}, "Local patch")

        result = refresh(self.working_copy, self.remote_url, "master")

        self.assertFalse(result.changed)
        self.assertEqual(Repo(self.working_copy).head.commit.hexsha, local_commit.hexsha)

    def test_fast_forward_moves_branch_without_merging(self):
        self.clone()
        remote_commit = commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")

        with patch("aursync.git_sync.operations.three_way_merge") as merge:
            result = refresh(self.working_copy, self.remote_url, "master")
            merge.assert_not_called()

        self.assertTrue(result.changed)
        self.assertEqual(result.analysis, MergeAnalysis.FAST_FORWARDABLE)
        self.assertIsNone(result.merge_commit)
        local = Repo(self.working_copy)
        self.assertEqual(local.heads["master"].commit.hexsha, remote_commit.hexsha)
        self.assertEqual(local.active_branch.name, "master")
        self.assertEqual((self.working_copy / "PKGBUILD").read_text(), pkgbuild("2.0"))

    def test_fast_forward_discards_local_modifications(self):
        self.clone()
        (self.working_copy / "PKGBUILD").write_text("edited by hand\n")
        commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")

        refresh(self.working_copy, self.remote_url, "master")

        self.assertEqual((self.working_copy / "PKGBUILD").read_text(), pkgbuild("2.0"))
        self.assertFalse(Repo(self.working_copy).is_dirty())

    def test_divergent_histories_merge_with_two_parents(self):
        local = self.clone()
        local_commit = commit_files(local, {"fix.patch": "patch\n"}, "Local patch")
        remote_commit = commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")

        result = refresh(self.working_copy, self.remote_url, "master")

        self.assertTrue(result.changed)
        self.assertEqual(result.analysis, MergeAnalysis.DIVERGENT)
        merged = Repo(self.working_copy).head.commit
        self.assertEqual(merged.hexsha, result.merge_commit)
        self.assertEqual(
            [parent.hexsha for parent in merged.parents],
            [local_commit.hexsha, remote_commit.hexsha]
        )
        self.assertEqual((self.working_copy / "PKGBUILD").read_text(), pkgbuild("2.0"))
        self.assertEqual((self.working_copy / "fix.patch").read_text(), "patch\n")
        self.assertFalse(Repo(self.working_copy).is_dirty())

    def test_conflicting_edits_raise_without_committing(self):
        local = self.clone()
        local_commit = commit_files(local, {"PKGBUILD": pkgbuild("3.0")}, "Local bump")
        commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")

        with self.assertRaises(MergeConflicts) as ctx:
            refresh(self.working_copy, self.remote_url, "master")

        self.assertEqual(ctx.exception.paths, ["PKGBUILD"])
        self.assertEqual(ctx.exception.package, "foo")
        local = Repo(self.working_copy)
        self.assertEqual(local.head.commit.hexsha, local_commit.hexsha)
        self.assertEqual(local.heads["master"].commit.hexsha, local_commit.hexsha)
        self.assertIn("<<<<<<<", (self.working_copy / "PKGBUILD").read_text())

    def test_conflicts_are_reported_again_on_the_next_refresh(self):
        local = self.clone()
        commit_files(local, {"PKGBUILD": pkgbuild("3.0")}, "Local bump")
        commit_files(self.remote, {"PKGBUILD": pkgbuild("2.0")}, "Update to 2.0")

        with self.assertRaises(MergeConflicts):
            refresh(self.working_copy, self.remote_url, "master")
        with self.assertRaises(MergeConflicts):
            refresh(self.working_copy, self.remote_url, "master")

    def test_unborn_working_copy_checks_out_remote_head(self):
        init_repository(self.working_copy)

        result = refresh(self.working_copy, self.remote_url, "master")

        self.assertTrue(result.changed)
        self.assertEqual(result.analysis, MergeAnalysis.UNBORN)
        local = Repo(self.working_copy)
        self.assertEqual(local.head.commit.hexsha, self.remote.head.commit.hexsha)
        self.assertEqual((self.working_copy / "PKGBUILD").read_text(), pkgbuild())

    def test_unreachable_remote_raises_fetch_failed(self):
        self.clone()
        shutil.rmtree(self.remotes / "foo")

        with self.assertRaises(FetchFailed) as ctx:
            refresh(self.working_copy, self.remote_url, "master")

        self.assertEqual(ctx.exception.package, "foo")

    def test_killed_fetch_raises_fetch_failed(self):
        local = self.clone()
        local.git.fetch = MagicMock(side_effect=GitCommandError(
            ["git", "fetch"], -9, b"Timeout: the command took longer than 5 seconds"
        ))

        with patch("aursync.git_sync.operations.open_working_copy", return_value=local):
            with self.assertRaises(FetchFailed) as ctx:
                refresh(self.working_copy, self.remote_url, "master", timeout=5)

        self.assertEqual(ctx.exception.package, "foo")
        local.git.fetch.assert_called_once_with("--no-tags", self.remote_url, "master", kill_after_timeout=5)

    def test_plain_directory_is_not_a_working_copy(self):
        self.working_copy.mkdir(parents=True)

        with self.assertRaises(SyncError):
            refresh(self.working_copy, self.remote_url, "master")


if __name__ == "__main__":
    unittest.main()
